from .quads import (
    Attributes,
    Category,
    Option,
    Quad,
    QuadLibrary,
    derive_style_code,
    image_url,
    library_from_dict,
    load_library,
)
from .visibility import QuadVisibility

__all__ = [
    "Attributes",
    "Category",
    "Option",
    "Quad",
    "QuadLibrary",
    "QuadVisibility",
    "derive_style_code",
    "image_url",
    "library_from_dict",
    "load_library",
]
