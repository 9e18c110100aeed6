"""
Signature base construction for RFC 9421 HTTP Message Signatures

This module builds the canonical signature base from a per-request signing
context, plus the Signature-Input header value that lets the verifier
rebuild the identical base.
"""

from typing import List

from ..exceptions import SigningError
from .types import (
    SignatureComponent,
    SignatureParams,
    SigningContext,
    SigningErrorCodes,
    SIGNATURE_LABEL,
    SIGNATURE_PARAMS_COMPONENT,
)
from .utils import (
    encode_signature_component,
    build_signature_params_string,
)


class CanonicalMessageBuilder:
    """
    Signature base builder for RFC 9421 signatures
    """

    def __init__(self, context: SigningContext):
        """
        Initialize signature base builder.

        Args:
            context: Per-request signing context
        """
        self.method = context.method
        self.url = context.url
        self.params = context.params
        self.content_digest = context.content_digest

    def build(self) -> str:
        """
        Build the signature base.

        One line per covered component in parameter order, then the
        @signature-params line. Lines are joined with a single LF and there
        is no trailing newline.

        Returns:
            str: Signature base string

        Raises:
            SigningError: If a covered component has no value
        """
        lines = [self._build_component(component) for component in self.params.components]
        lines.append(self._build_signature_params_component())

        return '\n'.join(lines)

    def _build_component(self, component: SignatureComponent) -> str:
        if component is SignatureComponent.METHOD:
            return encode_signature_component(component.value, self.method)

        if component is SignatureComponent.TARGET_URI:
            return encode_signature_component(component.value, self.url)

        if component is SignatureComponent.CONTENT_DIGEST:
            if not self.content_digest:
                raise SigningError(
                    'Content digest covered but not provided',
                    SigningErrorCodes.SIGNATURE_BASE_FAILED,
                    {"component": component.value}
                )
            return encode_signature_component(component.value, self.content_digest.header_value)

        raise SigningError(
            f"Unsupported signature component: {component}",
            SigningErrorCodes.SIGNATURE_BASE_FAILED,
            {"component": str(component)}
        )

    def _build_signature_params_component(self) -> str:
        return encode_signature_component(
            SIGNATURE_PARAMS_COMPONENT,
            serialize_signature_params(self.params)
        )


def serialize_signature_params(params: SignatureParams) -> str:
    """
    Serialize signature parameters.

    Args:
        params: Signature parameters

    Returns:
        str: Parameters string shared by the signature base and Signature-Input
    """
    return build_signature_params_string(
        params.components,
        params.created,
        params.keyid,
        params.alg
    )


def build_signature_base(context: SigningContext) -> str:
    """
    Build signature base for signing.

    Args:
        context: Signing context

    Returns:
        str: Signature base string
    """
    return CanonicalMessageBuilder(context).build()


def build_signature_input(params: SignatureParams, signature_label: str = SIGNATURE_LABEL) -> str:
    """
    Build Signature-Input header value.

    Args:
        params: Signature parameters
        signature_label: Label for the signature

    Returns:
        str: Signature-Input header value, e.g. sig=("@method" ...);created=...
    """
    return f"{signature_label}={serialize_signature_params(params)}"


def extract_covered_components(signature_base: str) -> List[str]:
    """
    Extract covered component names from a signature base.

    Args:
        signature_base: Signature base string

    Returns:
        list: Component names in order, excluding @signature-params
    """
    components = []

    for line in signature_base.split('\n'):
        if line.startswith('"') and '": ' in line:
            end_quote = line.find('"', 1)
            component_name = line[1:end_quote]
            if component_name != SIGNATURE_PARAMS_COMPONENT:
                components.append(component_name)

    return components
