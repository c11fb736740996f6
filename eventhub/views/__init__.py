# eventhub/views/__init__.py
"""
Views package for the eventhub app.
Re-exports all views from organized submodules.
"""

# Utilities and pagination
from .utils import (
    EventPagination,
    StandardPagination,
    OrderPagination,
    LargePagination,
    build_event_discovery_qs,
    decode_qr_from_uploaded,
)

# Authentication views
from .auth_views import CustomTokenObtainPairView, RegistrationView, LogoutView

# User views
from .user_views import UserProfileView

# Event views
from .event_views import (
    EventListView,
    EventDetailView,
    SubEventListView,
    RelatedEventsView,
    OrganizerEventsView,
    EventStatisticsView,
    SyncSubEventsView,
    EventCalendarView,
    GoogleCalendarLinkView,
)

# Order views
from .order_views import (
    OrderCreateView,
    MyOrdersView,
    EventOrdersView,
    RegistrationCheckView,
    CancelOrderTicketsView,
)

# Ticket views
from .ticket_views import (
    MyTicketsView,
    TicketDetailView,
    EventTicketsView,
    VerifyEntryCodeView,
    QRScanView,
    GenerateTicketsView,
)

# Export views
from .export_views import EventAttendeesCSVView, EventAttendeesExcelView

# Email views
from .email_views import ResendConfirmationView, view_ticket_signed

# Stakeholder views
from .stakeholder_views import (
    StakeholderListView,
    StakeholderDetailView,
    BulkAttendanceView,
    StakeholderStatsView,
    StakeholderImportView,
    StakeholderImportDetailView,
    SyncStakeholdersFromOrdersView,
    StakeholderExportView,
)

# Certificate views
from .certificate_views import (
    CertificateTemplateListView,
    CertificateTemplateDetailView,
    CertificateListView,
    GenerateCertificateView,
    BulkGenerateCertificatesView,
    AutoGenerateCertificatesView,
    CertificateDownloadView,
    EmailCertificatesView,
)

# Gallery views
from .gallery_views import (
    EventGalleryListView,
    GalleryDetailView,
    SharedGalleryView,
    GalleryPhotoListView,
    PhotoDetailView,
    PhotoLikeView,
    PhotoDownloadView,
    GalleryAccessListView,
    GalleryAccessDetailView,
    PhotoCommentListView,
    PhotoCommentModerationView,
)

# Feedback views
from .feedback_views import (
    FeedbackTemplateView,
    FeedbackSubmitView,
    FeedbackResponsesView,
    FeedbackAnalyticsView,
    SendFeedbackEmailsView,
    FeedbackCronView,
)

# Issue views
from .issue_views import (
    IssueReportView,
    MyIssuesView,
    EventIssuesView,
    IssueStatusView,
    IssueAnalyticsView,
)

# Event update views
from .update_views import (
    EventUpdateListView,
    EventUpdateDetailView,
    PublishEventUpdateView,
    EventUpdateStatsView,
)

# Planning board views
from .task_views import (
    EventTaskListView,
    EventTaskDetailView,
    BulkTaskColumnView,
    EventTasksExistView,
    GenerateEventTasksView,
)

# Report views
from .report_views import EventReportListView, ReportDetailView, GenerateReportView

# Communication views
from .communication_views import StakeholderEmailView

# Campus location
from .location_views import CampusLocationListView, PredictLocationView

# Health
from .health_views import HealthView


__all__ = [
    # Utilities
    'EventPagination',
    'StandardPagination',
    'OrderPagination',
    'LargePagination',
    'build_event_discovery_qs',
    'decode_qr_from_uploaded',

    # Authentication
    'CustomTokenObtainPairView',
    'RegistrationView',
    'LogoutView',

    # User
    'UserProfileView',

    # Events
    'EventListView',
    'EventDetailView',
    'SubEventListView',
    'RelatedEventsView',
    'OrganizerEventsView',
    'EventStatisticsView',
    'SyncSubEventsView',
    'EventCalendarView',
    'GoogleCalendarLinkView',

    # Orders
    'OrderCreateView',
    'MyOrdersView',
    'EventOrdersView',
    'RegistrationCheckView',
    'CancelOrderTicketsView',

    # Tickets
    'MyTicketsView',
    'TicketDetailView',
    'EventTicketsView',
    'VerifyEntryCodeView',
    'QRScanView',
    'GenerateTicketsView',

    # Export
    'EventAttendeesCSVView',
    'EventAttendeesExcelView',

    # Email
    'ResendConfirmationView',
    'view_ticket_signed',

    # Stakeholders
    'StakeholderListView',
    'StakeholderDetailView',
    'BulkAttendanceView',
    'StakeholderStatsView',
    'StakeholderImportView',
    'StakeholderImportDetailView',
    'SyncStakeholdersFromOrdersView',
    'StakeholderExportView',

    # Certificates
    'CertificateTemplateListView',
    'CertificateTemplateDetailView',
    'CertificateListView',
    'GenerateCertificateView',
    'BulkGenerateCertificatesView',
    'AutoGenerateCertificatesView',
    'CertificateDownloadView',
    'EmailCertificatesView',

    # Galleries
    'EventGalleryListView',
    'GalleryDetailView',
    'SharedGalleryView',
    'GalleryPhotoListView',
    'PhotoDetailView',
    'PhotoLikeView',
    'PhotoDownloadView',
    'GalleryAccessListView',
    'GalleryAccessDetailView',
    'PhotoCommentListView',
    'PhotoCommentModerationView',

    # Feedback
    'FeedbackTemplateView',
    'FeedbackSubmitView',
    'FeedbackResponsesView',
    'FeedbackAnalyticsView',
    'SendFeedbackEmailsView',
    'FeedbackCronView',

    # Issues
    'IssueReportView',
    'MyIssuesView',
    'EventIssuesView',
    'IssueStatusView',
    'IssueAnalyticsView',

    # Event updates
    'EventUpdateListView',
    'EventUpdateDetailView',
    'PublishEventUpdateView',
    'EventUpdateStatsView',

    # Planning board
    'EventTaskListView',
    'EventTaskDetailView',
    'BulkTaskColumnView',
    'EventTasksExistView',
    'GenerateEventTasksView',

    # Reports
    'EventReportListView',
    'ReportDetailView',
    'GenerateReportView',

    # Communications
    'StakeholderEmailView',

    # Campus location
    'CampusLocationListView',
    'PredictLocationView',

    # Health
    'HealthView',
]
