from .classifier import ClassifiedUrl, classify, extract_content_id, is_valid_url

__all__ = ["ClassifiedUrl", "classify", "extract_content_id", "is_valid_url"]
