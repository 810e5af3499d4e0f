import logging
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    DRF exception handler used project wide.

    DRF's own exceptions (validation, auth, 404, ...) keep DRF's response.
    Anything else is logged with its traceback and turned into a generic 500
    so internals never leak to the client.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    logger.exception('Unhandled error in %s', view.__class__.__name__ if view else 'unknown view', exc_info=exc)
    return Response({'detail': 'Internal Server Error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
