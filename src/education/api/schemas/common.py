from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from src.shared.utils import as_naive_utc

# Client timestamps may carry an offset; storage is naive UTC.
UtcDateTime = Annotated[datetime, AfterValidator(as_naive_utc)]
