import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .exceptions import ConsistencyViolation, StoreError, ValidationError
from .serializers import IdentifyRequestSerializer

logger = logging.getLogger(__name__)


def index(request):
    return HttpResponse(
        "Welcome! To test the POST /identify API, please use Postman or curl.",
        content_type="text/plain",
    )


class IdentifyAPIView(APIView):

    def get_resolver(self):
        return services.get_resolver()

    def post(self, request):
        """
        Handles the /identify endpoint.
        Consolidates contact information based on email or phone number.
        """
        logger.info(f"Identify request received with data: {request.data}")

        serializer = IdentifyRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": "Invalid request body.", "details": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            view = services.reconcile_identity(
                email=serializer.validated_data.get("email"),
                phone_number=serializer.validated_data.get("phone_number"),
                resolver=self.get_resolver(),
            )
        except ValidationError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except (StoreError, ConsistencyViolation) as e:
            logger.error(f"Identify request aborted: {e}", exc_info=True)
            return self.server_error()
        except Exception as e:
            # Log the full exception traceback for detailed debugging
            logger.error(f"An unexpected error occurred in /identify: {e}", exc_info=True)
            return self.server_error()

        return Response(view.to_dict(), status=status.HTTP_200_OK)

    def server_error(self):
        return Response(
            {"error": "An internal server error occurred."},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
