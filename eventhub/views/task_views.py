# eventhub/views/task_views.py
"""
Planning board for an event: columns of task cards with subtasks, optionally
drafted by Gemini.
"""

import logging

from django.db import transaction

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..gemini import fallback_tasks, generate_event_tasks
from ..models import EventTask
from ..serializers import EventTaskSerializer, SubtaskUpdateSerializer, TaskColumnUpdateSerializer
from .utils import managed_event

logger = logging.getLogger(__name__)


def _board(event):
    return EventTaskSerializer(event.planning_tasks.order_by("position", "created_at"), many=True).data


@transaction.atomic
def replace_board(event, organizer, tasks):
    """Swap the event's board for ``tasks`` (validated serializer data)."""
    event.planning_tasks.all().delete()
    EventTask.objects.bulk_create([
        EventTask(
            event=event,
            organizer=organizer,
            key=task["key"],
            content=task["content"],
            column=task.get("column", EventTask.PLANNING),
            priority=task.get("priority", "medium"),
            estimated_duration=task.get("estimated_duration", ""),
            completed=task.get("completed", False),
            subtasks=task.get("subtasks", []),
            position=index,
        )
        for index, task in enumerate(tasks)
    ])


class EventTaskListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        return Response({"tasks": _board(event)})

    def put(self, request, pk):
        """Save the whole board."""
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = EventTaskSerializer(data=request.data.get("tasks", []), many=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        keys = [task["key"] for task in serializer.validated_data]
        if len(keys) != len(set(keys)):
            return Response({"error": "Task ids must be unique"}, status=status.HTTP_400_BAD_REQUEST)

        replace_board(event, request.user, serializer.validated_data)
        return Response({"message": "Tasks saved", "tasks": _board(event)})

    def delete(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        deleted, _ = event.planning_tasks.all().delete()
        return Response({"message": f"Deleted {deleted} task(s)", "deleted": deleted})


class EventTaskDetailView(APIView):
    """
    One card. ``PATCH`` with ``subtask_id`` edits that subtask; otherwise the
    card's own fields.
    """
    permission_classes = [IsAuthenticated]

    def _load(self, request, pk, key):
        event, error = managed_event(request, pk)
        if error:
            return None, error
        task = event.planning_tasks.filter(key=key).first()
        if task is None:
            return None, Response({"error": "Task not found"}, status=status.HTTP_404_NOT_FOUND)
        return task, None

    def patch(self, request, pk, key):
        task, error = self._load(request, pk, key)
        if error:
            return error

        if "subtask_id" in request.data:
            serializer = SubtaskUpdateSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
            data = serializer.validated_data
            subtasks = list(task.subtasks or [])
            for sub in subtasks:
                if sub.get("id") == data["subtask_id"]:
                    for field in ("completed", "content"):
                        if field in data:
                            sub[field] = data[field]
                    break
            else:
                return Response({"error": "Subtask not found"}, status=status.HTTP_404_NOT_FOUND)
            task.subtasks = subtasks
            task.save(update_fields=["subtasks", "updated_at"])
            return Response(EventTaskSerializer(task).data)

        data = request.data.copy()
        data.pop("id", None)
        serializer = EventTaskSerializer(task, data=data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    def delete(self, request, pk, key):
        task, error = self._load(request, pk, key)
        if error:
            return error
        task.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class BulkTaskColumnView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        serializer = TaskColumnUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        updated = event.planning_tasks.filter(
            key__in=serializer.validated_data["task_ids"]
        ).update(column=serializer.validated_data["column"])
        return Response({"message": f"Moved {updated} task(s)", "modifiedCount": updated})


class EventTasksExistView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        count = event.planning_tasks.count()
        return Response({"exists": count > 0, "count": count})


class GenerateEventTasksView(APIView):
    """
    Draft a board with Gemini. An existing board is returned untouched unless
    ``force_regenerate`` is set.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        event, error = managed_event(request, pk)
        if error:
            return error
        force = str(request.data.get("force_regenerate", "")).lower() in ("1", "true", "yes")
        if event.planning_tasks.exists() and not force:
            return Response({"generated": False, "tasks": _board(event)})

        suggested = generate_event_tasks(event)
        serializer = EventTaskSerializer(data=suggested, many=True)
        if not serializer.is_valid():
            logger.warning("Suggested board for event %s rejected, using fallback: %s", event.pk, serializer.errors)
            serializer = EventTaskSerializer(data=fallback_tasks(is_sub_event=bool(event.parent_event_id)), many=True)
            serializer.is_valid(raise_exception=True)
        replace_board(event, request.user, serializer.validated_data)
        logger.info("Planning board generated for event %s", event.pk)
        return Response({"generated": True, "tasks": _board(event)}, status=status.HTTP_201_CREATED)
