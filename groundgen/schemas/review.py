"""Schemas for the review analysis endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class ReviewAnalysisRequest(BaseModel):
    """Request body for POST /reviews/analyze."""

    model_config = ConfigDict(populate_by_name=True)

    review_text: str = Field("", alias="reviewText", description="The customer's review text.")


class ReviewAnalysisResponse(BaseModel):
    """Response for POST /reviews/analyze."""

    model_config = ConfigDict(populate_by_name=True)

    sentiment: str = Field(..., description="Positive, Neutral, or Negative.")
    rating: int = Field(..., ge=0, le=5, description="1-5 rating, 0 when the model gave none.")
    key_insight: str = Field(..., alias="keyInsight", description="One-line takeaway from the review.")
