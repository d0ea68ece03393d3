from .ui import event_stream_ui
from .outputs import register_event_stream_outputs

__all__ = [
    'event_stream_ui',
    'register_event_stream_outputs',
]
