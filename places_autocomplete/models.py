from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StructuredText(BaseModel):
    text: str = ""


class StructuredFormat(BaseModel):
    """Primary / secondary labels of a suggestion, as split by the Places API."""

    model_config = ConfigDict(populate_by_name=True)

    main_text: StructuredText = Field(..., alias="mainText")
    secondary_text: Optional[StructuredText] = Field(None, alias="secondaryText")


class PlacePrediction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    place_id: str = Field(..., alias="placeId")
    types: List[str] = Field(default_factory=list)
    structured_format: StructuredFormat = Field(..., alias="structuredFormat")


class Suggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    place_prediction: PlacePrediction = Field(..., alias="placePrediction")

    @property
    def main_text(self) -> str:
        return self.place_prediction.structured_format.main_text.text

    @property
    def secondary_text(self) -> Optional[str]:
        secondary = self.place_prediction.structured_format.secondary_text
        return secondary.text if secondary is not None else None

    @property
    def full_address(self) -> str:
        if self.secondary_text is None:
            return self.main_text
        return f"{self.main_text}, {self.secondary_text}"


class Geocode(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class Place(BaseModel):
    id: str
    name: str
    full_address: str
    types: List[str] = Field(default_factory=list)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    raw: Dict[str, Any] = Field(default_factory=dict)
    address_components: StructuredFormat


class OrchestratorState(BaseModel):
    query: str = ""
    places: List[Place] = Field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None


class QueryRequest(BaseModel):
    query: str = Field("", description="Free-text place query; empty clears the results")
