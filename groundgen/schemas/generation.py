"""Schemas for the generate and product lookup endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    """Request body for POST /generate. Field names match what the review UI sends."""

    model_config = ConfigDict(populate_by_name=True)

    user_prompt: str = Field("", alias="userPrompt", description="Prompt text; required and non-empty.")
    system_prompt: str | None = Field(None, alias="systemPrompt", description="Optional instruction sent separately from the prompt.")
    use_search: bool = Field(False, alias="useSearch", description="Ground the answer in a live web search.")


class ProductLookupRequest(BaseModel):
    """Request body for POST /products/lookup."""

    model_config = ConfigDict(populate_by_name=True)

    product_query: str = Field("", alias="productQuery", description="Product name to look up, e.g. 'Sony A7 III Camera'.")


class SourceOut(BaseModel):
    """One web citation."""

    uri: str
    title: str


class GenerateResponse(BaseModel):
    """Response for POST /generate and POST /products/lookup."""

    text: str = Field(..., description="Generated text from the first candidate.")
    sources: list[SourceOut] = Field(default_factory=list, description="Grounding citations in upstream order.")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "text": "The Sony A7 III is a full-frame mirrorless camera...",
                    "sources": [{"uri": "https://example.com/a7iii", "title": "Sony A7 III review"}],
                }
            ]
        }
    }
