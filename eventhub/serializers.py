"""
Serializers for the eventhub app.
"""

import json

from django.contrib.auth.hashers import make_password
from django.db import transaction
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import (
    User,
    Category,
    Tag,
    Event,
    Order,
    Ticket,
    Stakeholder,
    StakeholderImport,
    CertificateTemplate,
    Certificate,
    Gallery,
    Photo,
    GalleryAccess,
    PhotoComment,
    FeedbackTemplate,
    FeedbackResponse,
    Issue,
    EventUpdate,
    EventTask,
    Report,
)


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT token serializer that includes user role information."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)

        token['email'] = user.email
        token['role'] = user.role
        token['first_name'] = user.first_name
        token['last_name'] = user.last_name

        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model."""

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'role',
            'student_id', 'phone_number', 'date_of_birth',
            'is_verified', 'created_at'
        ]
        read_only_fields = ['id', 'email', 'role', 'is_verified', 'created_at']


class RegistrationSerializer(serializers.ModelSerializer):
    """Self-service sign-up. Admin accounts cannot be requested."""

    password = serializers.CharField(write_only=True, min_length=8)
    role = serializers.ChoiceField(
        choices=[User.ROLE_STUDENT, User.ROLE_ORGANIZER], default=User.ROLE_STUDENT
    )

    class Meta:
        model = User
        fields = [
            'id', 'email', 'password', 'first_name', 'last_name', 'role',
            'student_id', 'phone_number', 'date_of_birth',
        ]
        read_only_fields = ['id']

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists")
        return value.lower()

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class UserBriefSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(source='get_full_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'full_name']


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name']


class TagSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tag
        fields = ['id', 'name']


# --- Events -------------------------------------------------------------------

class EventSerializer(serializers.ModelSerializer):
    """Read serializer for events."""

    category = CategorySerializer(read_only=True)
    tags = TagSerializer(many=True, read_only=True)
    organizer = UserBriefSerializer(read_only=True)
    cover_url = serializers.ReadOnlyField()
    tickets_sold = serializers.ReadOnlyField()
    sub_event_count = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            'id', 'title', 'description', 'cover_url', 'image_url', 'is_online',
            'location', 'landmark', 'campus_location', 'start_at', 'end_at', 'duration',
            'total_capacity', 'tickets_left', 'sold_out', 'tickets_sold', 'is_free', 'price',
            'category', 'tags', 'organizer', 'age_restriction', 'url',
            'parent_event', 'event_type', 'sub_event_count', 'status', 'feedback_enabled',
            'created_at', 'updated_at',
        ]

    def get_sub_event_count(self, obj):
        return obj.sub_events.count()


class EventWriteSerializer(serializers.ModelSerializer):
    """
    Create/update serializer for events.

    ``category`` and ``tags`` are given by name and created on demand.
    """

    category = serializers.CharField(required=False, allow_blank=True, write_only=True)
    tags = serializers.ListField(
        child=serializers.CharField(max_length=60), required=False, write_only=True
    )
    parent_event = serializers.PrimaryKeyRelatedField(
        queryset=Event.objects.all(), required=False, allow_null=True
    )

    class Meta:
        model = Event
        fields = [
            'id', 'title', 'description', 'image', 'image_url', 'is_online',
            'location', 'landmark', 'campus_location', 'start_at', 'end_at', 'duration',
            'total_capacity', 'is_free', 'price', 'category', 'tags', 'age_restriction',
            'url', 'parent_event', 'status', 'feedback_enabled',
        ]
        read_only_fields = ['id']

    def validate(self, attrs):
        start = attrs.get('start_at', getattr(self.instance, 'start_at', None))
        end = attrs.get('end_at', getattr(self.instance, 'end_at', None))
        if start and end and end <= start:
            raise serializers.ValidationError({"end_at": "End time must be after the start time"})

        parent = attrs.get('parent_event')
        if parent is not None:
            if self.instance is not None and parent.pk == self.instance.pk:
                raise serializers.ValidationError({"parent_event": "An event cannot be its own parent"})
            if parent.parent_event_id:
                raise serializers.ValidationError({"parent_event": "Sub-events cannot have their own sub-events"})

        is_free = attrs.get('is_free', getattr(self.instance, 'is_free', True))
        price = attrs.get('price', getattr(self.instance, 'price', 0))
        if not is_free and parent is None and not price:
            raise serializers.ValidationError({"price": "Paid events need a price"})
        if not attrs.get('is_online', getattr(self.instance, 'is_online', False)):
            location = attrs.get('location', getattr(self.instance, 'location', ''))
            if not location:
                raise serializers.ValidationError({"location": "In-person events need a location"})
        return attrs

    def _apply_taxonomy(self, event, category_name, tag_names):
        if category_name is not None:
            event.category = Category.get_or_create_by_name(category_name)
            event.save(update_fields=['category'])
        if tag_names is not None:
            event.tags.set([t for t in (Tag.get_or_create_by_name(n) for n in tag_names) if t])

    @transaction.atomic
    def create(self, validated_data):
        category_name = validated_data.pop('category', None)
        tag_names = validated_data.pop('tags', None)
        parent = validated_data.get('parent_event')

        if parent is not None:
            # sub-events draw on the parent's seats and pricing
            validated_data['event_type'] = Event.SUB
            validated_data['total_capacity'] = 0
            validated_data['tickets_left'] = parent.tickets_left
            validated_data['sold_out'] = parent.sold_out
            validated_data['is_free'] = parent.is_free
            validated_data['price'] = parent.price
            if not validated_data.get('image') and not validated_data.get('image_url'):
                validated_data['image_url'] = parent.cover_url or ''
            if category_name is None and parent.category_id:
                validated_data['category'] = parent.category
        else:
            capacity = validated_data.get('total_capacity') or 0
            validated_data['event_type'] = Event.MAIN
            validated_data['tickets_left'] = capacity if capacity else Event.UNLIMITED
            validated_data['sold_out'] = False

        if validated_data.get('is_free'):
            validated_data['price'] = 0

        event = Event.objects.create(**validated_data)
        self._apply_taxonomy(event, category_name, tag_names)
        return event

    @transaction.atomic
    def update(self, instance, validated_data):
        category_name = validated_data.pop('category', None)
        tag_names = validated_data.pop('tags', None)
        validated_data.pop('parent_event', None)
        capacity_changed = (
            'total_capacity' in validated_data
            and validated_data['total_capacity'] != instance.total_capacity
            and not instance.parent_event_id
        )
        if instance.parent_event_id:
            validated_data.pop('total_capacity', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if instance.is_free:
            instance.price = 0
        if capacity_changed:
            instance.recompute_capacity()
        instance.save()

        if capacity_changed:
            instance.sub_events.update(tickets_left=instance.tickets_left, sold_out=instance.sold_out)
        self._apply_taxonomy(instance, category_name, tag_names)
        return instance


# --- Orders & tickets ---------------------------------------------------------

class OrderCreateSerializer(serializers.Serializer):
    event_id = serializers.PrimaryKeyRelatedField(queryset=Event.objects.all(), source='event')
    sub_event_id = serializers.PrimaryKeyRelatedField(
        queryset=Event.objects.filter(parent_event__isnull=False),
        source='sub_event', required=False, allow_null=True,
    )
    quantity = serializers.IntegerField(min_value=1, max_value=20, default=1)
    payment_reference = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")


class TicketSerializer(serializers.ModelSerializer):
    """Serializer for Ticket model."""

    event_title = serializers.CharField(source='event.title', read_only=True)
    event_start = serializers.DateTimeField(source='event.start_at', read_only=True)
    user_email = serializers.CharField(source='user.email', read_only=True)
    qr_code_url = serializers.ReadOnlyField()

    class Meta:
        model = Ticket
        fields = [
            'id', 'ticket_id', 'entry_code', 'status', 'order', 'event', 'event_title',
            'event_start', 'user', 'user_email', 'qr_code_url', 'qr_code_data',
            'issued_at', 'verified_at', 'verified_by', 'expires_at', 'metadata',
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    event_title = serializers.CharField(source='event.title', read_only=True)
    sub_event_title = serializers.CharField(source='sub_event.title', read_only=True, default=None)
    buyer = UserBriefSerializer(read_only=True)
    tickets = TicketSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'payment_reference', 'total_tickets', 'total_amount', 'event', 'event_title',
            'sub_event', 'sub_event_title', 'buyer', 'status', 'created_at', 'tickets',
        ]
        read_only_fields = fields


class EntryCodeSerializer(serializers.Serializer):
    entry_code = serializers.RegexField(r'^\d{6}$', error_messages={"invalid": "Entry code must be 6 digits"})


class QRScanSerializer(serializers.Serializer):
    qr_data = serializers.CharField(required=False, allow_blank=True)
    qr_image = serializers.ImageField(required=False)

    def validate(self, attrs):
        if not attrs.get('qr_data') and not attrs.get('qr_image'):
            raise serializers.ValidationError("Provide qr_data or qr_image")
        return attrs


# --- Campus location ----------------------------------------------------------

class LocationPredictionSerializer(serializers.Serializer):
    """Coordinates and/or a photo (upload or base64) plus the blend weights."""

    latitude = serializers.FloatField(required=False, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, min_value=-180, max_value=180)
    image = serializers.ImageField(required=False)
    image_base64 = serializers.CharField(required=False, allow_blank=True)
    gps_weight = serializers.IntegerField(required=False, min_value=0, max_value=100, default=40)
    ai_weight = serializers.IntegerField(required=False, min_value=0, max_value=100, default=60)

    def validate(self, attrs):
        if ('latitude' in attrs) != ('longitude' in attrs):
            raise serializers.ValidationError("latitude and longitude must be sent together")
        return attrs


# --- Stakeholders -------------------------------------------------------------

class StakeholderSerializer(serializers.ModelSerializer):
    """Serializer for Stakeholder model."""

    certificate_id = serializers.PrimaryKeyRelatedField(source='certificate', read_only=True)

    class Meta:
        model = Stakeholder
        fields = [
            'id', 'event', 'name', 'email', 'role', 'attendance_status', 'user',
            'additional_info', 'certificate_generated', 'certificate_id', 'emails_sent',
            'imported_at', 'imported_by', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'event', 'user', 'certificate_generated', 'certificate_id', 'emails_sent',
            'imported_at', 'imported_by', 'created_at', 'updated_at',
        ]

    def validate_email(self, value):
        value = value.strip().lower()
        event = self.context.get('event') or getattr(self.instance, 'event', None)
        if event is not None:
            qs = Stakeholder.objects.filter(event=event, email=value)
            if self.instance is not None:
                qs = qs.exclude(pk=self.instance.pk)
            if qs.exists():
                raise serializers.ValidationError("Stakeholder with this email already exists for this event")
        return value

    def validate_additional_info(self, value):
        allowed = {'company', 'title', 'phone', 'notes'}
        unknown = set(value or {}) - allowed
        if unknown:
            raise serializers.ValidationError(f"Unknown keys: {', '.join(sorted(unknown))}")
        return value


class BulkAttendanceSerializer(serializers.Serializer):
    stakeholder_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    attendance_status = serializers.ChoiceField(choices=Stakeholder.ATTENDANCE_CHOICES)


class StakeholderImportSerializer(serializers.ModelSerializer):
    class Meta:
        model = StakeholderImport
        fields = [
            'id', 'event', 'file_name', 'total_records', 'successful_imports', 'failed_imports',
            'errors', 'status', 'imported_by', 'created_at', 'completed_at',
        ]
        read_only_fields = fields


# --- Certificates -------------------------------------------------------------

class CertificateFieldSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=60)
    name = serializers.CharField(max_length=120)
    type = serializers.ChoiceField(choices=['text', 'date', 'signature', 'image'], default='text')
    x = serializers.FloatField(min_value=0, max_value=100)
    y = serializers.FloatField(min_value=0, max_value=100)
    width = serializers.FloatField(required=False, allow_null=True)
    height = serializers.FloatField(required=False, allow_null=True)
    font_size = serializers.IntegerField(min_value=4, max_value=120, default=12)
    font_family = serializers.CharField(max_length=60, default='Arial')
    color = serializers.RegexField(r'^#[0-9a-fA-F]{6}$', default='#000000')
    required = serializers.BooleanField(default=False)


class CertificateTemplateSerializer(serializers.ModelSerializer):
    fields = serializers.ListField(child=CertificateFieldSerializer(), required=False)

    class Meta:
        model = CertificateTemplate
        fields = [
            'id', 'event', 'name', 'description', 'template_url', 'template_type',
            'fields', 'default_values', 'is_active', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'event', 'is_active', 'created_by', 'created_at', 'updated_at']


class CertificateSerializer(serializers.ModelSerializer):
    stakeholder_name = serializers.CharField(source='stakeholder.name', read_only=True)
    stakeholder_email = serializers.CharField(source='stakeholder.email', read_only=True)
    template_name = serializers.CharField(source='template.name', read_only=True)
    file_url = serializers.ReadOnlyField()

    class Meta:
        model = Certificate
        fields = [
            'id', 'template', 'template_name', 'event', 'stakeholder', 'stakeholder_name',
            'stakeholder_email', 'file_url', 'field_values', 'generated_at', 'email_sent',
            'email_sent_at', 'download_count', 'last_download_at',
        ]
        read_only_fields = fields


class CertificateGenerateSerializer(serializers.Serializer):
    template_id = serializers.IntegerField()
    stakeholder_id = serializers.IntegerField()
    field_values = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)


class BulkCertificateSerializer(serializers.Serializer):
    template_id = serializers.IntegerField()
    stakeholder_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    field_values = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)


# --- Galleries ----------------------------------------------------------------

class GallerySerializer(serializers.ModelSerializer):
    """Serializer for Gallery model. The access password is write-only and stored hashed."""

    access_password = serializers.CharField(write_only=True, required=False, allow_blank=True)
    has_password = serializers.SerializerMethodField()
    photo_count = serializers.SerializerMethodField()

    class Meta:
        model = Gallery
        fields = [
            'id', 'event', 'name', 'description', 'cover_photo', 'visibility',
            'access_password', 'has_password', 'allow_download', 'allow_comments',
            'shareable_link', 'link_expiry', 'view_count', 'download_count', 'photo_count',
            'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'event', 'shareable_link', 'view_count', 'download_count',
            'created_by', 'created_at', 'updated_at',
        ]

    def get_has_password(self, obj):
        return bool(obj.access_password)

    def get_photo_count(self, obj):
        return obj.photos.count()

    def _hash_password(self, validated_data):
        if 'access_password' in validated_data:
            raw = validated_data['access_password']
            validated_data['access_password'] = make_password(raw) if raw else ''
        return validated_data

    def create(self, validated_data):
        return super().create(self._hash_password(validated_data))

    def update(self, instance, validated_data):
        return super().update(instance, self._hash_password(validated_data))


class PhotoSerializer(serializers.ModelSerializer):
    url = serializers.ReadOnlyField()
    thumb_url = serializers.ReadOnlyField()
    uploaded_by = UserBriefSerializer(read_only=True)

    class Meta:
        model = Photo
        fields = [
            'id', 'gallery', 'event', 'image', 'file_url', 'url', 'thumb_url', 'original_name',
            'file_size', 'mime_type', 'width', 'height', 'metadata', 'visibility',
            'view_count', 'download_count', 'like_count', 'uploaded_by', 'uploaded_at',
        ]
        read_only_fields = [
            'id', 'gallery', 'event', 'url', 'thumb_url', 'file_size', 'width', 'height',
            'view_count', 'download_count', 'like_count', 'uploaded_by', 'uploaded_at',
        ]
        extra_kwargs = {'image': {'write_only': True}}

    def validate_metadata(self, value):
        # multipart uploads send the metadata as a JSON string
        if isinstance(value, str):
            try:
                value = json.loads(value or "{}")
            except ValueError:
                raise serializers.ValidationError("metadata must be a JSON object")
        if not isinstance(value, dict):
            raise serializers.ValidationError("metadata must be a JSON object")
        tags = value.get('tags', [])
        if not isinstance(tags, list):
            raise serializers.ValidationError("tags must be a list")
        value['tags'] = [str(t).strip().lower() for t in tags if str(t).strip()]
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get('image') and not attrs.get('file_url'):
            raise serializers.ValidationError("Upload an image or provide file_url")
        return attrs


class GalleryAccessSerializer(serializers.ModelSerializer):
    class Meta:
        model = GalleryAccess
        fields = ['id', 'gallery', 'user', 'email', 'access_type', 'expires_at', 'granted_by', 'granted_at']
        read_only_fields = ['id', 'gallery', 'granted_by', 'granted_at']

    def validate(self, attrs):
        if not attrs.get('user') and not attrs.get('email'):
            raise serializers.ValidationError("Grant access to a user or an email address")
        if attrs.get('email'):
            attrs['email'] = attrs['email'].lower()
        return attrs


class PhotoCommentSerializer(serializers.ModelSerializer):
    author_name = serializers.ReadOnlyField()

    class Meta:
        model = PhotoComment
        fields = ['id', 'photo', 'user', 'guest_name', 'guest_email', 'author_name', 'content', 'is_approved', 'created_at']
        read_only_fields = ['id', 'photo', 'user', 'is_approved', 'created_at']
        extra_kwargs = {'guest_email': {'write_only': True}}


# --- Feedback -----------------------------------------------------------------

class CustomQuestionSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=60)
    question = serializers.CharField(max_length=500)
    type = serializers.ChoiceField(choices=['rating', 'text', 'multipleChoice', 'yesNo'])
    required = serializers.BooleanField(default=False)
    options = serializers.ListField(child=serializers.CharField(max_length=200), required=False, default=list)

    def validate(self, attrs):
        if attrs['type'] == 'multipleChoice' and len(attrs.get('options') or []) < 2:
            raise serializers.ValidationError("Multiple choice questions need at least two options")
        return attrs


class FeedbackTemplateSerializer(serializers.ModelSerializer):
    custom_questions = serializers.ListField(child=CustomQuestionSerializer(), required=False)
    feedback_hours = serializers.IntegerField(min_value=1, max_value=168, default=2)

    class Meta:
        model = FeedbackTemplate
        fields = ['id', 'event', 'custom_questions', 'feedback_hours', 'emails_sent_at', 'created_at', 'updated_at']
        read_only_fields = ['id', 'event', 'emails_sent_at', 'created_at', 'updated_at']


class FeedbackResponseSerializer(serializers.ModelSerializer):
    user = UserBriefSerializer(read_only=True)

    class Meta:
        model = FeedbackResponse
        fields = [
            'id', 'event', 'user', 'overall_satisfaction', 'content_quality', 'organization_rating',
            'venue_rating', 'recommendation_score', 'liked_most', 'improvements',
            'additional_comments', 'custom_answers', 'is_anonymous', 'submitted_at',
        ]
        read_only_fields = ['id', 'event', 'user', 'submitted_at']
        extra_kwargs = {
            'liked_most': {'max_length': 1000},
            'improvements': {'max_length': 1000},
            'additional_comments': {'max_length': 2000},
        }

    def validate_custom_answers(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("custom_answers must be a list")
        for answer in value:
            if not isinstance(answer, dict) or 'question_id' not in answer or 'answer' not in answer:
                raise serializers.ValidationError("Each answer needs question_id and answer")
        return value

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.is_anonymous:
            data['user'] = None
        return data


# --- Issues -------------------------------------------------------------------

class IssueSerializer(serializers.ModelSerializer):
    class Meta:
        model = Issue
        fields = [
            'id', 'event', 'event_title', 'reported_by', 'reporter_name', 'reporter_email',
            'category', 'subcategory', 'severity', 'title', 'description', 'attachments',
            'status', 'organizer', 'organizer_email', 'admin_notes', 'resolved_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'event_title', 'reported_by', 'reporter_name', 'reporter_email', 'status',
            'organizer', 'organizer_email', 'admin_notes', 'resolved_at', 'created_at', 'updated_at',
        ]


class IssueStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Issue.STATUS_CHOICES)
    admin_notes = serializers.CharField(required=False, allow_blank=True)


# --- Event updates ------------------------------------------------------------

class EventUpdateSerializer(serializers.ModelSerializer):
    created_by = UserBriefSerializer(read_only=True)

    class Meta:
        model = EventUpdate
        fields = [
            'id', 'event', 'title', 'content', 'update_type', 'priority', 'status',
            'published_at', 'scheduled_for', 'created_by', 'recipients', 'delivery_methods',
            'email_stats', 'attachments', 'metadata', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'event', 'status', 'published_at', 'created_by', 'email_stats',
            'created_at', 'updated_at',
        ]

    def validate_delivery_methods(self, value):
        allowed = {'email', 'sms', 'in_app', 'push'}
        if set(value) - allowed:
            raise serializers.ValidationError(f"Allowed keys: {', '.join(sorted(allowed))}")
        merged = {'email': True, 'sms': False, 'in_app': True, 'push': False}
        merged.update({k: bool(v) for k, v in value.items()})
        return merged


# --- Planning board -----------------------------------------------------------

class SubtaskSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)
    content = serializers.CharField(max_length=500)
    completed = serializers.BooleanField(default=False)


class EventTaskSerializer(serializers.ModelSerializer):
    """Board card. ``id`` on the wire is the client-side key."""

    id = serializers.CharField(source='key', max_length=64)
    subtasks = serializers.ListField(child=SubtaskSerializer(), required=False)

    class Meta:
        model = EventTask
        fields = ['id', 'content', 'column', 'priority', 'estimated_duration', 'completed', 'subtasks', 'position']
        read_only_fields = ['position']


class TaskColumnUpdateSerializer(serializers.Serializer):
    task_ids = serializers.ListField(child=serializers.CharField(max_length=64), allow_empty=False)
    column = serializers.ChoiceField(choices=EventTask.COLUMN_CHOICES)


class SubtaskUpdateSerializer(serializers.Serializer):
    subtask_id = serializers.CharField(max_length=64)
    completed = serializers.BooleanField(required=False)
    content = serializers.CharField(max_length=500, required=False)


# --- Reports ------------------------------------------------------------------

class ReportSerializer(serializers.ModelSerializer):
    class Meta:
        model = Report
        fields = [
            'id', 'event', 'organizer', 'prepared_by', 'key_highlights', 'major_outcomes',
            'budget', 'sponsorship', 'actual_expenditure', 'photos', 'generated_content',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'event', 'organizer', 'generated_content', 'created_at', 'updated_at']
