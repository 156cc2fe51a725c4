from .refs import custom_fields, metas_of, refs_of, with_metas, without_refs

__all__ = [
    "custom_fields",
    "metas_of",
    "refs_of",
    "with_metas",
    "without_refs",
]
