from defwire._internal.annotations import (
    ActivationAnnotation,
    DeprecatedAnnotation,
    deprecated,
    on_activation,
)
from defwire._internal.arguments import (
    ConfigArgument,
    ContainerArgument,
    ReferenceArgument,
    ReferenceKind,
    TransformArgument,
)
from defwire._internal.circular import assert_no_circular_dependencies
from defwire._internal.config_provider import (
    config_provider_from_object,
    get_config_provider_for_container,
)
from defwire._internal.container import Container, current_container
from defwire._internal.create_container import create_container
from defwire._internal.definition import Definition
from defwire._internal.lookup import ByAnnotation, ByPredicate, ByServiceName, ByType, Lookup
from defwire._internal.middlewares.activation import activation_middleware
from defwire._internal.middlewares.config import ConfigMiddleware, config_middleware
from defwire._internal.middlewares.deprecated import deprecated_middleware
from defwire._internal.reference import config, reference, transform
from defwire._internal.type_reference import TypeReference
from defwire.exceptions import (
    DefWireAlreadyDefinedError,
    DefWireAmbiguousServiceError,
    DefWireCircularDependencyError,
    DefWireConfigProviderNotAttachedError,
    DefWireContainerNotSetError,
    DefWireDefinitionLockedError,
    DefWireDefinitionWithoutContainerError,
    DefWireError,
    DefWireIncompleteDefinitionError,
    DefWireInvalidArgumentError,
    DefWireInvalidTypeReferenceTargetError,
    DefWireMissingConfigValueError,
    DefWireNoMatchingServiceError,
    DefWireOwnerCannotBeChangedError,
    DefWireServiceNotFoundError,
)

__all__ = [
    "ActivationAnnotation",
    "ByAnnotation",
    "ByPredicate",
    "ByServiceName",
    "ByType",
    "ConfigArgument",
    "ConfigMiddleware",
    "Container",
    "ContainerArgument",
    "DefWireAlreadyDefinedError",
    "DefWireAmbiguousServiceError",
    "DefWireCircularDependencyError",
    "DefWireConfigProviderNotAttachedError",
    "DefWireContainerNotSetError",
    "DefWireDefinitionLockedError",
    "DefWireDefinitionWithoutContainerError",
    "DefWireError",
    "DefWireIncompleteDefinitionError",
    "DefWireInvalidArgumentError",
    "DefWireInvalidTypeReferenceTargetError",
    "DefWireMissingConfigValueError",
    "DefWireNoMatchingServiceError",
    "DefWireOwnerCannotBeChangedError",
    "DefWireServiceNotFoundError",
    "Definition",
    "DeprecatedAnnotation",
    "Lookup",
    "ReferenceArgument",
    "ReferenceKind",
    "TransformArgument",
    "TypeReference",
    "activation_middleware",
    "assert_no_circular_dependencies",
    "config",
    "config_middleware",
    "config_provider_from_object",
    "create_container",
    "current_container",
    "deprecated",
    "deprecated_middleware",
    "get_config_provider_for_container",
    "on_activation",
    "reference",
    "transform",
]
