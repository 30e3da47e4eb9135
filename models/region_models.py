"""Regional endpoint metadata.

The region only changes which endpoints and expected latency are reported in diagnostics;
it never changes how a translation is resolved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal, TypeAlias

__all__: list[str] = ["DEFAULT_REGION", "REGIONAL_CONFIGS", "RegionalConfig", "RegionName"]

RegionName: TypeAlias = Literal["us-east", "eu-west", "asia-pacific"]

DEFAULT_REGION: Final[str] = "us-east"


@dataclass(frozen=True)
class RegionalConfig:
    """Endpoints and expected latency for one deployment region.

    Attributes:
        name (str): Region identifier.
        gemini_endpoint (str): Vertex AI endpoint serving the region.
        azure_endpoint (str): Azure Cognitive Services endpoint serving the region.
        elevenlabs_endpoint (str): ElevenLabs endpoint serving the region.
        latency_ms (int): Typical round trip in milliseconds.
    """

    name: str
    gemini_endpoint: str
    azure_endpoint: str
    elevenlabs_endpoint: str
    latency_ms: int


REGIONAL_CONFIGS: Final[dict[str, RegionalConfig]] = {
    "us-east": RegionalConfig(
        name="us-east",
        gemini_endpoint="https://us-central1-aiplatform.googleapis.com",
        azure_endpoint="https://eastus.api.cognitive.microsoft.com",
        elevenlabs_endpoint="https://api.elevenlabs.io",
        latency_ms=50,
    ),
    "eu-west": RegionalConfig(
        name="eu-west",
        gemini_endpoint="https://europe-west4-aiplatform.googleapis.com",
        azure_endpoint="https://westeurope.api.cognitive.microsoft.com",
        elevenlabs_endpoint="https://eu.api.elevenlabs.io",
        latency_ms=30,
    ),
    "asia-pacific": RegionalConfig(
        name="asia-pacific",
        gemini_endpoint="https://asia-southeast1-aiplatform.googleapis.com",
        azure_endpoint="https://southeastasia.api.cognitive.microsoft.com",
        elevenlabs_endpoint="https://asia.api.elevenlabs.io",
        latency_ms=40,
    ),
}
