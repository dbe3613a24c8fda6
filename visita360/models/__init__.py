"""Database models — re-exports all models.

Import from here:  from visita360.models import Visit, FollowUp, AppState
Or from submodules: from visita360.models.visits import Visit
"""

from .base import Base  # noqa: F401

# Field sales: visits and their follow-up interactions
from .visits import FollowUp, Visit  # noqa: F401

# Persisted JSON blobs (geocode cache, runtime config)
from .state import AppState  # noqa: F401
