"""Configuration data models for the universal translator.

Each dataclass mirrors one section of ``universal_translator.ini``. Field names are the INI keys;
the type of each default value decides how the loader coerces the string found in the file.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = ["Config"]


@dataclass
class General:
    DEBUG: bool = False
    VERSION: str = ""
    SCRIPT_NAME: str = ""
    LOG_FILE: str = ""
    LOG_LEVEL: str = "INFO"


@dataclass
class Translation:
    ENGINE: list[str] = field(default_factory=lambda: ["gemini", "relay"])
    REGION: str = "us-east"
    SOURCE_LANGUAGE: str = "en"
    TARGET_LANGUAGE: str = "es"
    DEFAULT_SOURCE_LANGUAGE: str = "en"
    PROVIDER_TIMEOUT: float = 10.0
    DEFAULT_CONFIDENCE: float = 0.9


@dataclass
class Gemini:
    MODEL: str = "gemini-1.5-flash"
    BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    TEMPERATURE: float = 0.1
    TOP_K: int = 1
    TOP_P: float = 0.8
    MAX_OUTPUT_TOKENS: int = 1000


@dataclass
class Relay:
    ENDPOINTS: dict[str, str] = field(default_factory=dict)


@dataclass
class Cache:
    TTL_SEC: float = 3600.0
    MAX_ENTRIES: int = 1000
    INFLIGHT_TIMEOUT: float = 15.0


@dataclass
class Dictionary:
    PATH: str = ""


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    TRANSLATION: Translation = field(default_factory=Translation)
    GEMINI: Gemini = field(default_factory=Gemini)
    RELAY: Relay = field(default_factory=Relay)
    CACHE: Cache = field(default_factory=Cache)
    DICTIONARY: Dictionary = field(default_factory=Dictionary)
