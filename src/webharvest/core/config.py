from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class HttpSettings(BaseModel):
    """Configurações do cliente HTTP usadas por extratores e flows."""

    timeout: int = Field(default=15, gt=0)
    user_agent: Optional[str] = None
    page_size: int = Field(default=20, gt=0, le=1000)
    # Limite opcional de páginas por execução (None = até esgotar a fonte)
    max_pages: Optional[int] = Field(default=None, gt=0)


class PipelineConfig(BaseModel):
    """
    Contrato de Configuração Universal.
    Define tudo que é necessário para rodar uma coleta.
    """

    job_name: str
    environment: str = Field(default="dev", pattern="^(dev|staging|prod)$")
    source_type: str  # ex: "rest_api", "federal_register", "link_crawl"

    # Configurações de Origem
    source_url: str
    source_params: Dict[str, Any] = Field(default_factory=dict)

    http: HttpSettings = Field(default_factory=HttpSettings)

    @field_validator("job_name")
    def job_name_must_be_slug(cls, v):
        if " " in v:
            raise ValueError("job_name não deve conter espaços")
        return v.lower()

    @field_validator("source_url")
    def source_url_must_be_http(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("source_url deve começar com http:// ou https://")
        return v
