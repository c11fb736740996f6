# eventhub/urls.py
from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views


urlpatterns = [
    # Auth
    path("api/auth/token/", views.CustomTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/auth/register/", views.RegistrationView.as_view(), name="register"),
    path("api/auth/logout/", views.LogoutView.as_view(), name="logout"),
    path("api/profile/", views.UserProfileView.as_view(), name="user_profile"),

    # Health
    path("api/health/", views.HealthView.as_view(), name="health"),

    # Campus location
    path("api/campus-locations/", views.CampusLocationListView.as_view(), name="campus_locations"),
    path("api/predict/", views.PredictLocationView.as_view(), name="predict_location"),

    # Events
    path("api/events/", views.EventListView.as_view(), name="event_list"),
    path("api/events/mine/", views.OrganizerEventsView.as_view(), name="my_organized_events"),
    path("api/organizers/<int:user_id>/events/", views.OrganizerEventsView.as_view(), name="organizer_events"),
    path("api/events/<int:pk>/", views.EventDetailView.as_view(), name="event_detail"),
    path("api/events/<int:pk>/sub-events/", views.SubEventListView.as_view(), name="sub_event_list"),
    path("api/events/<int:pk>/sub-events/sync/", views.SyncSubEventsView.as_view(), name="sync_sub_events"),
    path("api/events/<int:pk>/related/", views.RelatedEventsView.as_view(), name="related_events"),
    path("api/events/<int:pk>/statistics/", views.EventStatisticsView.as_view(), name="event_statistics"),
    path("api/events/<int:pk>/calendar.ics", views.EventCalendarView.as_view(), name="event_calendar_ics"),
    path("api/events/<int:pk>/google-calendar/", views.GoogleCalendarLinkView.as_view(), name="event_google_calendar"),

    # Orders
    path("api/orders/", views.OrderCreateView.as_view(), name="order_create"),
    path("api/orders/mine/", views.MyOrdersView.as_view(), name="my_orders"),
    path("api/orders/<int:pk>/cancel/", views.CancelOrderTicketsView.as_view(), name="order_cancel"),
    path("api/events/<int:pk>/orders/", views.EventOrdersView.as_view(), name="event_orders"),
    path("api/events/<int:pk>/registration/", views.RegistrationCheckView.as_view(), name="registration_check"),

    # Tickets
    path("api/tickets/my-tickets/", views.MyTicketsView.as_view(), name="my_tickets"),
    path("api/tickets/<int:pk>/", views.TicketDetailView.as_view(), name="ticket_detail"),
    path("api/tickets/<int:pk>/resend-confirmation/", views.ResendConfirmationView.as_view(), name="resend_confirmation"),
    path("api/events/<int:pk>/tickets/", views.EventTicketsView.as_view(), name="event_tickets"),
    path("api/events/<int:pk>/tickets/generate/", views.GenerateTicketsView.as_view(), name="generate_tickets"),
    path("api/events/<int:pk>/verify/", views.VerifyEntryCodeView.as_view(), name="verify_entry_code"),
    path("api/events/<int:pk>/scan/", views.QRScanView.as_view(), name="qr_scan"),
    path("tickets/view/", views.view_ticket_signed, name="view_ticket_signed"),

    # Attendee exports
    path("api/events/<int:pk>/attendees/csv/", views.EventAttendeesCSVView.as_view(), name="event_attendees_csv"),
    path("api/events/<int:pk>/attendees/xlsx/", views.EventAttendeesExcelView.as_view(), name="event_attendees_xlsx"),

    # Stakeholders
    path("api/events/<int:pk>/stakeholders/", views.StakeholderListView.as_view(), name="stakeholder_list"),
    path("api/events/<int:pk>/stakeholders/attendance/", views.BulkAttendanceView.as_view(), name="stakeholder_bulk_attendance"),
    path("api/events/<int:pk>/stakeholders/stats/", views.StakeholderStatsView.as_view(), name="stakeholder_stats"),
    path("api/events/<int:pk>/stakeholders/import/", views.StakeholderImportView.as_view(), name="stakeholder_import"),
    path("api/events/<int:pk>/stakeholders/sync-orders/", views.SyncStakeholdersFromOrdersView.as_view(), name="stakeholder_sync_orders"),
    path("api/events/<int:pk>/stakeholders/export/", views.StakeholderExportView.as_view(), name="stakeholder_export"),
    path("api/events/<int:pk>/stakeholders/email/", views.StakeholderEmailView.as_view(), name="stakeholder_email"),
    path("api/stakeholders/<int:pk>/", views.StakeholderDetailView.as_view(), name="stakeholder_detail"),
    path("api/stakeholder-imports/<int:pk>/", views.StakeholderImportDetailView.as_view(), name="stakeholder_import_detail"),

    # Certificates
    path("api/events/<int:pk>/certificate-templates/", views.CertificateTemplateListView.as_view(), name="certificate_template_list"),
    path("api/certificate-templates/<int:pk>/", views.CertificateTemplateDetailView.as_view(), name="certificate_template_detail"),
    path("api/events/<int:pk>/certificates/", views.CertificateListView.as_view(), name="certificate_list"),
    path("api/events/<int:pk>/certificates/generate/", views.GenerateCertificateView.as_view(), name="certificate_generate"),
    path("api/events/<int:pk>/certificates/bulk/", views.BulkGenerateCertificatesView.as_view(), name="certificate_bulk"),
    path("api/events/<int:pk>/certificates/auto/", views.AutoGenerateCertificatesView.as_view(), name="certificate_auto"),
    path("api/events/<int:pk>/certificates/email/", views.EmailCertificatesView.as_view(), name="certificate_email"),
    path("api/certificates/<int:pk>/download/", views.CertificateDownloadView.as_view(), name="certificate_download"),

    # Galleries
    path("api/events/<int:pk>/galleries/", views.EventGalleryListView.as_view(), name="gallery_list"),
    path("api/galleries/<int:pk>/", views.GalleryDetailView.as_view(), name="gallery_detail"),
    path("api/galleries/shared/<str:link>/", views.SharedGalleryView.as_view(), name="gallery_shared"),
    path("api/galleries/<int:pk>/photos/", views.GalleryPhotoListView.as_view(), name="gallery_photos"),
    path("api/galleries/<int:pk>/access/", views.GalleryAccessListView.as_view(), name="gallery_access"),
    path("api/gallery-access/<int:pk>/", views.GalleryAccessDetailView.as_view(), name="gallery_access_detail"),
    path("api/photos/<int:pk>/", views.PhotoDetailView.as_view(), name="photo_detail"),
    path("api/photos/<int:pk>/like/", views.PhotoLikeView.as_view(), name="photo_like"),
    path("api/photos/<int:pk>/download/", views.PhotoDownloadView.as_view(), name="photo_download"),
    path("api/photos/<int:pk>/comments/", views.PhotoCommentListView.as_view(), name="photo_comments"),
    path("api/photo-comments/<int:pk>/", views.PhotoCommentModerationView.as_view(), name="photo_comment_moderation"),

    # Feedback
    path("api/events/<int:pk>/feedback/template/", views.FeedbackTemplateView.as_view(), name="feedback_template"),
    path("api/events/<int:pk>/feedback/", views.FeedbackSubmitView.as_view(), name="feedback_submit"),
    path("api/events/<int:pk>/feedback/responses/", views.FeedbackResponsesView.as_view(), name="feedback_responses"),
    path("api/events/<int:pk>/feedback/analytics/", views.FeedbackAnalyticsView.as_view(), name="feedback_analytics"),
    path("api/events/<int:pk>/feedback/send/", views.SendFeedbackEmailsView.as_view(), name="feedback_send"),
    path("api/cron/feedback-emails/", views.FeedbackCronView.as_view(), name="feedback_cron"),

    # Issues
    path("api/issues/", views.IssueReportView.as_view(), name="issue_report"),
    path("api/issues/mine/", views.MyIssuesView.as_view(), name="my_issues"),
    path("api/issues/<int:pk>/status/", views.IssueStatusView.as_view(), name="issue_status"),
    path("api/events/<int:pk>/issues/", views.EventIssuesView.as_view(), name="event_issues"),
    path("api/events/<int:pk>/issues/analytics/", views.IssueAnalyticsView.as_view(), name="issue_analytics"),

    # Event updates
    path("api/events/<int:pk>/updates/", views.EventUpdateListView.as_view(), name="event_update_list"),
    path("api/events/<int:pk>/updates/stats/", views.EventUpdateStatsView.as_view(), name="event_update_stats"),
    path("api/updates/<int:pk>/", views.EventUpdateDetailView.as_view(), name="event_update_detail"),
    path("api/updates/<int:pk>/publish/", views.PublishEventUpdateView.as_view(), name="event_update_publish"),

    # Planning board
    path("api/events/<int:pk>/tasks/", views.EventTaskListView.as_view(), name="event_tasks"),
    path("api/events/<int:pk>/tasks/exists/", views.EventTasksExistView.as_view(), name="event_tasks_exist"),
    path("api/events/<int:pk>/tasks/columns/", views.BulkTaskColumnView.as_view(), name="event_tasks_columns"),
    path("api/events/<int:pk>/tasks/generate/", views.GenerateEventTasksView.as_view(), name="event_tasks_generate"),
    path("api/events/<int:pk>/tasks/<str:key>/", views.EventTaskDetailView.as_view(), name="event_task_detail"),

    # Reports
    path("api/events/<int:pk>/reports/", views.EventReportListView.as_view(), name="event_reports"),
    path("api/reports/<int:pk>/", views.ReportDetailView.as_view(), name="report_detail"),
    path("api/reports/<int:pk>/generate/", views.GenerateReportView.as_view(), name="report_generate"),
]
