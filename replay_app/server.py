from .logging_config import get_logger
from .modules.event_stream import register_event_stream_outputs
from .services.blockchain_service import ReplayService

logger = get_logger('server')


def server(input, output, session):

    logger.info("New dashboard session")

    # Connect on first replay, not at page load
    register_event_stream_outputs(output, input, session, service_factory=ReplayService.connect)
