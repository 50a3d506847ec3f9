from django.shortcuts import get_object_or_404
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from admin_panel.utils import log_admin_activity, get_client_ip
from internship_tracking_system.exceptions import NotFoundError
from internships import services as application_services, workflow
from internships.models import InternshipApplication
from internships.serializers import InternshipApplicationSerializer
from internships.utils import APPLICATION_FILE_FIELDS, file_download_response
from logbooks import services as logbook_services
from logbooks.models import Logbook
from logbooks.serializers import LogbookSerializer
from . import services
from .models import CompanyOTP
from .serializers import CompanyLoginSerializer, ApplicationDecisionSerializer, LogbookDecisionSerializer


class CompanyView(APIView):
    """Company contacts have no account; every call carries email + OTP"""
    permission_classes = [AllowAny]
    authentication_classes = []


class CompanyLoginView(CompanyView):
    def post(self, request):
        serializer = CompanyLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        purpose, record = services.login(serializer.validated_data['email'], serializer.validated_data['otp'])

        if purpose == CompanyOTP.PURPOSE_APPLICATION:
            data = InternshipApplicationSerializer(record).data
        else:
            data = LogbookSerializer(record).data
        return Response({"success": True, "type": purpose, "data": data})


class CompanyApplicationDecisionView(CompanyView):
    def post(self, request):
        serializer = ApplicationDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        otp = services.verify_for_application(
            data['email'], data['otp'], data['basvuru_id'], purpose=CompanyOTP.PURPOSE_APPLICATION
        )
        application = application_services.decide(
            otp.application, workflow.COMPANY, serializer.decision,
            note=data.get('red_sebebi') or None,
            actor_label=otp.email,
            request=request,
        )
        otp.mark_as_used()
        return Response({
            "success": True,
            "message": "Başvuru onaylandı." if application.status == workflow.APPROVED else "Başvuru reddedildi.",
            "data": InternshipApplicationSerializer(application).data,
        })


class CompanyLogbookDecisionView(CompanyView):
    def post(self, request):
        serializer = LogbookDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        otp = services.verify_for_logbook(data['email'], data['otp'], data['defter_id'])
        logbook = logbook_services.company_decide(
            otp.logbook, serializer.decision,
            reason=data.get('red_sebebi') or None,
            actor_label=otp.email,
            request=request,
        )
        otp.mark_as_used()
        return Response({
            "success": True,
            "message": "Defter onaylandı." if logbook.status == Logbook.STATUS_ADVISOR_PENDING else "Defter reddedildi.",
            "data": LogbookSerializer(logbook).data,
        })


class CompanyDownloadView(CompanyView):
    """GET download/<basvuru_id>/<file_type>/?email=..&otp=.."""
    def get(self, request, basvuru_id, file_type):
        otp = services.verify_for_application(
            request.query_params.get('email'), request.query_params.get('otp'), basvuru_id
        )
        application = get_object_or_404(InternshipApplication, pk=basvuru_id)

        if file_type == 'defter':
            logbook = getattr(application, 'logbook', None)
            if logbook is None:
                raise NotFoundError("Bu başvuru için defter bulunamadı.")
            response = file_download_response(logbook.file, logbook.original_file_name or 'staj-defteri.pdf')
        else:
            field_name = APPLICATION_FILE_FIELDS.get(file_type)
            if field_name is None:
                raise NotFoundError("Geçersiz dosya türü.")
            response = file_download_response(getattr(application, field_name))

        log_admin_activity(
            actor_label=otp.email,
            action='DOWNLOAD',
            model_name='InternshipApplication',
            object_id=application.id,
            description=f"Company downloaded {file_type}",
            ip_address=get_client_ip(request),
        )
        return response
