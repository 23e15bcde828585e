from django.urls import path

from .views import IdentifyAPIView, index

urlpatterns = [
    path("", index, name="index"),
    path("identify", IdentifyAPIView.as_view(), name="identify"),
]
