from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class ErrorDetail(BaseModel):
    """HTTP エラー応答の detail 部。"""

    model_config = ConfigDict(extra="ignore")

    message: str
    reason_code: str
    diagnostics: Optional[Dict[str, Any]] = None
