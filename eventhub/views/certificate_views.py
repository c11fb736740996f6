# eventhub/views/certificate_views.py
"""
Certificate templates, generation, download and delivery.
"""

from django.db.models import F
from django.http import FileResponse
from django.utils import timezone

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..certificates import (
    CertificateError,
    auto_generate_for_attended,
    bulk_generate,
    ensure_default_templates,
    generate_certificate,
)
from ..models import Certificate, CertificateTemplate
from ..serializers import (
    BulkCertificateSerializer,
    CertificateGenerateSerializer,
    CertificateSerializer,
    CertificateTemplateSerializer,
)
from ..tasks import send_certificate_email
from .utils import managed_event


def _summary(results):
    ok = sum(1 for r in results if r["success"])
    return {"results": results, "successful": ok, "failed": len(results) - ok}


class CertificateTemplateListView(APIView):
    """Templates of an event. The four defaults are created on first listing."""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        ensure_default_templates(event, request.user)
        templates = event.certificate_templates.filter(is_active=True).order_by("name")
        return Response(CertificateTemplateSerializer(templates, many=True).data)

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = CertificateTemplateSerializer(data=request.data)
        if serializer.is_valid():
            template = serializer.save(event=event, created_by=request.user)
            return Response(CertificateTemplateSerializer(template).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class CertificateTemplateDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def _load(self, request, pk):
        try:
            template = CertificateTemplate.objects.select_related("event").get(pk=pk, is_active=True)
        except CertificateTemplate.DoesNotExist:
            return None, Response({"error": "Template not found"}, status=status.HTTP_404_NOT_FOUND)
        if not template.event.is_managed_by(request.user):
            return None, Response({"error": "You are not the organizer of this event"}, status=status.HTTP_403_FORBIDDEN)
        return template, None

    def get(self, request, pk):
        template, error = self._load(request, pk)
        if error:
            return error
        return Response(CertificateTemplateSerializer(template).data)

    def patch(self, request, pk):
        template, error = self._load(request, pk)
        if error:
            return error
        serializer = CertificateTemplateSerializer(template, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    put = patch

    def delete(self, request, pk):
        template, error = self._load(request, pk)
        if error:
            return error
        # issued certificates keep pointing at it
        template.is_active = False
        template.save(update_fields=["is_active", "updated_at"])
        return Response({"message": "Template deleted"})


class CertificateListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        certificates = (
            event.certificates
            .select_related("stakeholder", "template")
            .order_by("-generated_at")
        )
        return Response(CertificateSerializer(certificates, many=True).data)


class GenerateCertificateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = CertificateGenerateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        template = event.certificate_templates.filter(pk=data["template_id"], is_active=True).first()
        if template is None:
            return Response({"error": "Template not found"}, status=status.HTTP_404_NOT_FOUND)
        stakeholder = event.stakeholders.filter(pk=data["stakeholder_id"]).first()
        if stakeholder is None:
            return Response({"error": "Stakeholder not found"}, status=status.HTTP_404_NOT_FOUND)

        try:
            certificate = generate_certificate(
                template=template, stakeholder=stakeholder, overrides=data.get("field_values")
            )
        except CertificateError as exc:
            return Response({"error": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CertificateSerializer(certificate).data, status=status.HTTP_201_CREATED)


class BulkGenerateCertificatesView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = BulkCertificateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        template = event.certificate_templates.filter(pk=data["template_id"], is_active=True).first()
        if template is None:
            return Response({"error": "Template not found"}, status=status.HTTP_404_NOT_FOUND)
        stakeholders = event.stakeholders.filter(pk__in=data["stakeholder_ids"]).order_by("name")
        results = bulk_generate(template=template, stakeholders=stakeholders, overrides=data.get("field_values"))
        return Response(_summary(results))


class AutoGenerateCertificatesView(APIView):
    """Certify every attended stakeholder that has no certificate yet."""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        results = auto_generate_for_attended(event, request.user)
        return Response(_summary(results))


class CertificateDownloadView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        try:
            certificate = Certificate.objects.select_related("event", "stakeholder").get(pk=pk)
        except Certificate.DoesNotExist:
            return Response({"error": "Certificate not found"}, status=status.HTTP_404_NOT_FOUND)
        owner = certificate.stakeholder.user_id == request.user.id
        if not (owner or certificate.event.is_managed_by(request.user)):
            return Response({"error": "You do not have permission to download this certificate"}, status=status.HTTP_403_FORBIDDEN)
        if not certificate.file:
            return Response({"error": "Certificate file is missing"}, status=status.HTTP_404_NOT_FOUND)

        Certificate.objects.filter(pk=certificate.pk).update(
            download_count=F("download_count") + 1,
            last_download_at=timezone.now(),
        )
        filename = f"certificate_{certificate.stakeholder.name.replace(' ', '_')}.pdf"
        return FileResponse(
            certificate.file.open("rb"),
            as_attachment=True,
            filename=filename,
            content_type="application/pdf",
        )


class EmailCertificatesView(APIView):
    """Email generated certificates; ``stakeholder_ids`` narrows the recipients."""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        certificates = event.certificates.select_related("stakeholder", "event", "template")
        ids = request.data.get("stakeholder_ids")
        if ids:
            certificates = certificates.filter(stakeholder_id__in=ids)
        if not certificates.exists():
            return Response({"error": "No certificates to send"}, status=status.HTTP_400_BAD_REQUEST)

        sent = failed = 0
        for certificate in certificates:
            if send_certificate_email(certificate):
                sent += 1
            else:
                failed += 1
        return Response({"message": f"Sent {sent} certificate email(s)", "sent": sent, "failed": failed})
