"""Classification engine: methods, containers, namespace walk, unit identity."""

from .containers import (
    ExtensionContainerRecord,
    classify_type,
    contains_extension_methods,
    contains_non_extension_members,
    is_qualifying_extension_method,
)
from .methods import (
    ExtensionMethodRecord,
    UnhandledTypeKindError,
    classify_method,
    uses_method_type_parameter,
)
from .units import ProjectUnit, resolve_unit
from .walker import discover_containers

__all__ = [
    "ExtensionContainerRecord",
    "ExtensionMethodRecord",
    "ProjectUnit",
    "UnhandledTypeKindError",
    "classify_method",
    "classify_type",
    "contains_extension_methods",
    "contains_non_extension_members",
    "discover_containers",
    "is_qualifying_extension_method",
    "resolve_unit",
    "uses_method_type_parameter",
]
