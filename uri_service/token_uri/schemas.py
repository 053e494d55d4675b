"""
Pydantic schemas used by the FastAPI app.

Request/response bodies for the URI endpoints, plus `TokenMetadata`,
which documents the JSON document consumers expect to find at a
resolved location. The service never fetches or validates those
documents; the model is published at GET /metadata-schema.
"""

from __future__ import annotations

from typing import Annotated, List, Optional, Union

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Simple health check response."""

    status: str


class TokenURIResponse(BaseModel):
    """Response payload for GET /tokens/{token_id}/uri."""

    token_id: int
    uri: str


class TokenConfigResponse(BaseModel):
    """
    Stored configuration for one token.

    Tokens that were never written come back with every field at its
    zero value.
    """

    token_id: int
    explicit_uri: str
    base_uri: str
    use_id_in_path: bool
    is_configured: bool


class BasePathConfigRequest(BaseModel):
    """
    Request payload for PUT /tokens/{token_id}/base-path.

    `base_uri` must be non-empty; that is checked by the store so the
    same rule holds for callers that bypass HTTP.
    """

    base_uri: str
    use_id_in_path: bool = False


class BasePathBatchRequest(BaseModel):
    """
    Request payload for POST /tokens/base-path/batch.

    Three parallel arrays, entry `i` of each describing one token:

    - token_ids: ids to configure
    - base_uris: base path per id
    - use_id_in_path: append-id flag per id
    """

    token_ids: List[Annotated[int, Field(ge=0)]] = Field(default_factory=list)
    base_uris: List[str] = Field(default_factory=list)
    use_id_in_path: List[bool] = Field(default_factory=list)


class BasePathBatchResponse(BaseModel):
    configured: int


class ExplicitURIRequest(BaseModel):
    """Request payload for PUT /tokens/{token_id}/explicit-uri."""

    uri: str


class ContractMetadataURI(BaseModel):
    """Request and response payload for /contract-metadata."""

    uri: str


class ErrorResponse(BaseModel):
    detail: str
    error: str


class TokenAttribute(BaseModel):
    trait_type: str
    value: Union[str, int, float, bool]


class TokenMetadata(BaseModel):
    """
    Metadata document hosted at a token's resolved location.

    - name: display name
    - description: free-form description
    - image: locator of the token's image (ipfs://, https://, ...)
    - external_url: optional link to a page about the token
    - attributes: ordered trait/value pairs
    """

    name: str
    description: str
    image: str
    external_url: Optional[str] = None
    attributes: List[TokenAttribute] = Field(default_factory=list)
