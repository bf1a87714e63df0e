"""Pydantic schemas for the static LLM model catalog."""
from pydantic import BaseModel


class LLMModel(BaseModel):
    """A catalog record describing one model and its pricing unit."""

    item: str
    vendor: str
    category: str
    unit: str
    value: float


class ModelOption(BaseModel):
    """A model as offered in selection lists."""

    value: str
    label: str
