from pydantic import BaseModel
from typing import Dict

class HealthCheckResponse(BaseModel):
    status: str
    upstream_url: str
    services: Dict[str, str]

    @property
    def healthy(self) -> bool:
        return self.status == "ok"
