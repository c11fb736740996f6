# eventhub/views/gallery_views.py
"""
Event photo galleries: galleries, photos, access grants and comments.

Access rules:
    public      anyone
    private     the gallery creator (and event organizers/admins)
    restricted  the creator, a live GalleryAccess grant for the user or their
                email, or the gallery password (``?password=`` or the
                ``X-Gallery-Password`` header)
"""

from django.contrib.auth.hashers import check_password
from django.db.models import Q
from django.http import FileResponse
from django.utils import timezone

from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..analytics import increment
from ..models import Gallery, GalleryAccess, Photo, PhotoComment
from ..serializers import (
    GalleryAccessSerializer,
    GallerySerializer,
    PhotoCommentSerializer,
    PhotoSerializer,
)
from .utils import LargePagination, get_event_or_none, managed_event, paginate


def can_manage_gallery(gallery, user):
    if not (user and user.is_authenticated):
        return False
    return gallery.created_by_id == user.id or gallery.event.is_managed_by(user)


def _has_grant(gallery, user):
    if not (user and user.is_authenticated):
        return False
    now = timezone.now()
    return (
        gallery.access_grants
        .filter(Q(user=user) | Q(email__iexact=user.email))
        .filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))
        .exists()
    )


def can_view_gallery(gallery, request):
    user = request.user
    if gallery.visibility == Gallery.PUBLIC or can_manage_gallery(gallery, user):
        return True
    if gallery.visibility == Gallery.PRIVATE:
        return False
    if _has_grant(gallery, user):
        return True
    password = request.query_params.get("password") or request.headers.get("X-Gallery-Password")
    return bool(password and gallery.access_password and check_password(password, gallery.access_password))


def _load_gallery(request, pk, manage=False):
    try:
        gallery = Gallery.objects.select_related("event").get(pk=pk)
    except Gallery.DoesNotExist:
        return None, Response({"error": "Gallery not found"}, status=status.HTTP_404_NOT_FOUND)
    allowed = can_manage_gallery(gallery, request.user) if manage else can_view_gallery(gallery, request)
    if not allowed:
        return None, Response({"error": "You do not have access to this gallery"}, status=status.HTTP_403_FORBIDDEN)
    return gallery, None


def _load_photo(request, pk, manage=False):
    try:
        photo = Photo.objects.select_related("gallery", "gallery__event", "uploaded_by").get(pk=pk)
    except Photo.DoesNotExist:
        return None, Response({"error": "Photo not found"}, status=status.HTTP_404_NOT_FOUND)
    gallery = photo.gallery
    if manage:
        allowed = photo.uploaded_by_id == request.user.id or can_manage_gallery(gallery, request.user)
    else:
        allowed = can_view_gallery(gallery, request)
    if not allowed:
        return None, Response({"error": "You do not have access to this photo"}, status=status.HTTP_403_FORBIDDEN)
    return photo, None


class EventGalleryListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event = get_event_or_none(pk)
        if event is None:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        galleries = event.galleries.select_related("event").order_by("-created_at")
        if not event.is_managed_by(request.user):
            galleries = galleries.exclude(visibility=Gallery.PRIVATE).exclude(
                Q(link_expiry__isnull=False) & Q(link_expiry__lt=timezone.now())
            )
        return Response(GallerySerializer(galleries, many=True).data)

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = GallerySerializer(data=request.data)
        if serializer.is_valid():
            gallery = serializer.save(event=event, created_by=request.user)
            return Response(GallerySerializer(gallery).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class GalleryDetailView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, pk):
        gallery, error = _load_gallery(request, pk)
        if error:
            return error
        increment(Gallery, gallery.pk, "view_count")
        gallery.view_count += 1
        return Response(GallerySerializer(gallery).data)

    def patch(self, request, pk):
        gallery, error = _load_gallery(request, pk, manage=True)
        if error:
            return error
        serializer = GallerySerializer(gallery, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    def delete(self, request, pk):
        gallery, error = _load_gallery(request, pk, manage=True)
        if error:
            return error
        gallery.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class SharedGalleryView(APIView):
    """Look a gallery up by its shareable link."""
    permission_classes = [AllowAny]

    def get(self, request, link):
        gallery = Gallery.objects.select_related("event").filter(shareable_link=link).first()
        if gallery is None:
            return Response({"error": "Gallery not found"}, status=status.HTTP_404_NOT_FOUND)
        if gallery.link_expired():
            return Response({"error": "This gallery link has expired"}, status=status.HTTP_410_GONE)
        if not can_view_gallery(gallery, request):
            return Response(
                {"error": "You do not have access to this gallery", "requires_password": bool(gallery.access_password)},
                status=status.HTTP_403_FORBIDDEN,
            )
        increment(Gallery, gallery.pk, "view_count")
        gallery.view_count += 1
        return Response(GallerySerializer(gallery).data)


class GalleryPhotoListView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get(self, request, pk):
        gallery, error = _load_gallery(request, pk)
        if error:
            return error
        photos = gallery.photos.select_related("uploaded_by").order_by("-uploaded_at")
        tag = request.query_params.get("tag")
        if tag:
            # tags are a JSON list
            tag = tag.lower()
            tagged = [photo_id for photo_id, meta in photos.values_list("id", "metadata") if tag in (meta or {}).get("tags", [])]
            photos = photos.filter(pk__in=tagged)
        search = request.query_params.get("search")
        if search:
            photos = photos.filter(
                Q(original_name__icontains=search)
                | Q(metadata__caption__icontains=search)
                | Q(metadata__location__icontains=search)
                | Q(metadata__photographer__icontains=search)
            )
        return paginate(request, photos, PhotoSerializer, LargePagination)

    def post(self, request, pk):
        if not request.user.is_authenticated:
            return Response({"error": "Authentication required"}, status=status.HTTP_401_UNAUTHORIZED)
        gallery, error = _load_gallery(request, pk, manage=True)
        if error:
            return error
        serializer = PhotoSerializer(data=request.data)
        if serializer.is_valid():
            photo = serializer.save(gallery=gallery, event=gallery.event, uploaded_by=request.user)
            return Response(PhotoSerializer(photo).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class PhotoDetailView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, pk):
        photo, error = _load_photo(request, pk)
        if error:
            return error
        increment(Photo, photo.pk, "view_count")
        photo.view_count += 1
        return Response(PhotoSerializer(photo).data)

    def patch(self, request, pk):
        if not request.user.is_authenticated:
            return Response({"error": "Authentication required"}, status=status.HTTP_401_UNAUTHORIZED)
        photo, error = _load_photo(request, pk, manage=True)
        if error:
            return error
        serializer = PhotoSerializer(photo, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    def delete(self, request, pk):
        if not request.user.is_authenticated:
            return Response({"error": "Authentication required"}, status=status.HTTP_401_UNAUTHORIZED)
        photo, error = _load_photo(request, pk, manage=True)
        if error:
            return error
        photo.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class PhotoLikeView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, pk):
        photo, error = _load_photo(request, pk)
        if error:
            return error
        increment(Photo, photo.pk, "like_count")
        photo.refresh_from_db(fields=["like_count"])
        return Response({"like_count": photo.like_count})


class PhotoDownloadView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, pk):
        photo, error = _load_photo(request, pk)
        if error:
            return error
        if not photo.gallery.allow_download:
            return Response({"error": "Downloads are disabled for this gallery"}, status=status.HTTP_403_FORBIDDEN)

        increment(Photo, photo.pk, "download_count")
        increment(Gallery, photo.gallery_id, "download_count")
        if photo.image:
            return FileResponse(
                photo.image.open("rb"),
                as_attachment=True,
                filename=photo.original_name or photo.image.name.rsplit("/", 1)[-1],
            )
        return Response({"url": photo.file_url})


class GalleryAccessListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        gallery, error = _load_gallery(request, pk, manage=True)
        if error:
            return error
        grants = gallery.access_grants.select_related("user").order_by("-granted_at")
        return Response(GalleryAccessSerializer(grants, many=True).data)

    def post(self, request, pk):
        gallery, error = _load_gallery(request, pk, manage=True)
        if error:
            return error
        serializer = GalleryAccessSerializer(data=request.data)
        if serializer.is_valid():
            grant = serializer.save(gallery=gallery, granted_by=request.user)
            return Response(GalleryAccessSerializer(grant).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class GalleryAccessDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk):
        try:
            grant = GalleryAccess.objects.select_related("gallery", "gallery__event").get(pk=pk)
        except GalleryAccess.DoesNotExist:
            return Response({"error": "Access grant not found"}, status=status.HTTP_404_NOT_FOUND)
        if not can_manage_gallery(grant.gallery, request.user):
            return Response({"error": "You do not have access to this gallery"}, status=status.HTTP_403_FORBIDDEN)
        grant.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class PhotoCommentListView(APIView):
    """Approved comments on a photo. Signed-in comments are approved immediately."""
    permission_classes = [AllowAny]

    def get(self, request, pk):
        photo, error = _load_photo(request, pk)
        if error:
            return error
        comments = photo.comments.filter(is_approved=True).select_related("user").order_by("created_at")
        return Response(PhotoCommentSerializer(comments, many=True).data)

    def post(self, request, pk):
        photo, error = _load_photo(request, pk)
        if error:
            return error
        if not photo.gallery.allow_comments:
            return Response({"error": "Comments are disabled for this gallery"}, status=status.HTTP_403_FORBIDDEN)

        serializer = PhotoCommentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        if request.user.is_authenticated:
            comment = serializer.save(photo=photo, user=request.user, is_approved=True)
        else:
            if not serializer.validated_data.get("guest_name"):
                return Response({"error": "Guest comments need a name"}, status=status.HTTP_400_BAD_REQUEST)
            comment = serializer.save(photo=photo, is_approved=False)
        return Response(PhotoCommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class PhotoCommentModerationView(APIView):
    """Approve or remove a comment (gallery managers only)."""
    permission_classes = [IsAuthenticated]

    def _load(self, request, pk):
        try:
            comment = PhotoComment.objects.select_related("photo__gallery__event").get(pk=pk)
        except PhotoComment.DoesNotExist:
            return None, Response({"error": "Comment not found"}, status=status.HTTP_404_NOT_FOUND)
        if not can_manage_gallery(comment.photo.gallery, request.user):
            return None, Response({"error": "You do not have access to this gallery"}, status=status.HTTP_403_FORBIDDEN)
        return comment, None

    def post(self, request, pk):
        comment, error = self._load(request, pk)
        if error:
            return error
        comment.is_approved = True
        comment.save(update_fields=["is_approved"])
        return Response(PhotoCommentSerializer(comment).data)

    def delete(self, request, pk):
        comment, error = self._load(request, pk)
        if error:
            return error
        comment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
