from .providers import CobaltProvider, DownloadProvider, GenericJsonProvider, ProviderError, build_providers
from .service import BackendUnavailableError, DownloadClient, UnsupportedUrlError

__all__ = [
    "BackendUnavailableError",
    "CobaltProvider",
    "DownloadClient",
    "DownloadProvider",
    "GenericJsonProvider",
    "ProviderError",
    "UnsupportedUrlError",
    "build_providers",
]
