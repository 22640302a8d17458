from .ad_record import FRAME_SCHEMA, AdRecord, RawAdRow
from .snapshot import DashboardSnapshot

__all__ = ["FRAME_SCHEMA", "AdRecord", "DashboardSnapshot", "RawAdRow"]
