from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class DomainBindingSchema(BaseModel):
    domain: str
    action: Optional[str] = None
    certificate: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class ApplicationSchema(BaseModel):
    """Application in its camelCase wire form."""
    appId: str
    name: str
    orgId: Optional[str] = None
    domains: List[DomainBindingSchema] = Field(default_factory=list)
    environments: List[str] = Field(default_factory=list)
    requireSsl: Optional[bool] = None
    urls: Dict[str, str] = Field(default_factory=dict)
    url: Optional[str] = None
    trafficControlRules: Optional[List[Any]] = None
    configSettings: Optional[Any] = None
    authConfig: Optional[Dict[str, Any]] = None
    domainName: Optional[str] = None
    subDomain: Optional[str] = None
    domain: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="allow")


class BatchLookupRequest(BaseModel):
    app_ids: List[str] = Field(..., max_length=500)
    force_reload: bool = False


class FlushRequest(BaseModel):
    app_id: str
    name: str


class EnvUrlResponse(BaseModel):
    app_id: str
    environment: str
    url: str
