"""Pydantic models and domain entities for the relay service."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["Healthy", "Mild", "Moderate", "Severe"]
HealthStatus = Literal["Excellent", "Good", "Fair", "Poor", "Critical"]


class AnalysisRequest(BaseModel):
    """Inbound payload: a raw base64 image or a ``data:`` URI."""

    imageBase64: Optional[str] = None


class Disease(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    severity: Severity
    confidence: float = Field(ge=0, le=100)
    description: str


class Treatment(BaseModel):
    model_config = ConfigDict(extra="allow")

    immediate: List[str] = Field(default_factory=list)
    prevention: List[str] = Field(default_factory=list)
    chemicals: List[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Success variant of a diagnosis."""

    model_config = ConfigDict(extra="allow")

    fruitType: str
    isHealthy: bool
    healthStatus: Optional[HealthStatus] = None
    isEdible: Optional[bool] = None
    edibilityReason: Optional[str] = None
    affectedPercentage: Optional[float] = Field(default=None, ge=0, le=100)
    disease: Disease
    treatment: Treatment
    additionalNotes: str = ""


class ErrorResult(BaseModel):
    """Error variant of a diagnosis; no other field is meaningful."""

    error: str


class RelayResponse(BaseModel):
    """Status code and JSON body produced by one relay invocation."""

    status_code: int
    body: Dict[str, Any]
