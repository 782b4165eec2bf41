import os

from pydantic import BaseModel


class Settings(BaseModel):
    DATA_DIR: str = os.getenv("DATA_DIR", "data")

    # Global installations (SonarQube servers, scanners, JDKs)
    INSTALLATIONS_FILE: str = os.getenv("INSTALLATIONS_FILE", "installations.json")

    # Scanner process
    SCANNER_TIMEOUT_SEC: int = int(os.getenv("SCANNER_TIMEOUT_SEC", "3600"))


settings = Settings()
