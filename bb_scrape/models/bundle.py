from typing import List, Optional

from pydantic import BaseModel, ConfigDict

Row = List[str]


class OutputBundle(BaseModel):
    """Header row plus data rows produced by one extractor call.

    The same shape is used for cached datasets, so a bundle can be merged
    into the store and exported without conversion.
    """

    model_config = ConfigDict(frozen=True)

    headers: Optional[List[str]] = None
    rows: List[Row] = []
