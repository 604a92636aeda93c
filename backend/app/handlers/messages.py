"""Message thread handlers.

A thread belongs to one organization and is visible only to its
participants. Posting an item marks the thread unread for everyone else;
reading the items marks it read for the caller.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi.responses import JSONResponse
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.errors import Forbidden, NotFound, ValidationFailed
from backend.app.api.validation import parse_resource_id
from backend.app.db.context import RequestContext
from backend.app.db.models import Message, MessageItem, MessageParticipant, User
from backend.app.db.queries import select_threads
from backend.app.handlers.serializers import created, serialize_message, serialize_message_item
from backend.app.models.common import ThreadType
from backend.app.models.messages import (
    MessageCreate,
    MessageDeleteQuery,
    MessageItemCreate,
    MessageItemQuery,
    MessageUpdate,
)

logger = logging.getLogger(__name__)

# Thread kinds reused when the same two people start another conversation
ONE_TO_ONE = {ThreadType.dm, ThreadType.individual}

THREAD_ACCESS_DENIED = "Access denied or thread not found"


async def list_threads(ctx: RequestContext, session: AsyncSession) -> dict[str, Any]:
    """List the caller's threads, most recently active first.

    Each thread carries the caller's unread flag, the latest item and the
    first other participant.
    """
    result = await session.scalars(select_threads(ctx).order_by(Message.updated_at.desc()))
    threads = result.all()
    if not threads:
        return {"threads": []}
    thread_ids = [thread.id for thread in threads]

    unread: dict[uuid.UUID, bool] = {}
    others: dict[uuid.UUID, User] = {}
    rows = await session.execute(
        select(MessageParticipant, User)
        .join(User, User.id == MessageParticipant.user_id)
        .where(MessageParticipant.message_id.in_(thread_ids))
    )
    for participant, user in rows.all():
        if participant.user_id == ctx.user_id:
            unread[participant.message_id] = participant.unread
        else:
            others.setdefault(participant.message_id, user)

    latest: dict[uuid.UUID, dict[str, Any]] = {}
    items = await session.execute(
        select(MessageItem, User)
        .outerjoin(User, User.id == MessageItem.author_id)
        .where(MessageItem.message_id.in_(thread_ids), MessageItem.deleted_at.is_(None))
        .order_by(MessageItem.created_at.desc())
    )
    for item, author in items.all():
        latest.setdefault(item.message_id, serialize_message_item(item, author))

    threads_out = []
    for thread in threads:
        other = others.get(thread.id)
        is_unread = unread.get(thread.id, False)
        threads_out.append(
            {
                **serialize_message(thread),
                "unread": is_unread,
                "unread_count": 1 if is_unread else 0,
                "latest_item": latest.get(thread.id),
                "other_participant": None
                if other is None
                else {
                    "id": other.id,
                    "first_name": other.first_name,
                    "last_name": other.last_name,
                    "email": other.email,
                    "role": other.role,
                },
            }
        )
    return {"threads": threads_out}


async def _existing_one_to_one(
    ctx: RequestContext, session: AsyncSession, thread_type: ThreadType, recipient: uuid.UUID
) -> Message | None:
    with_recipient = select(MessageParticipant.message_id).where(
        MessageParticipant.user_id == recipient
    )
    return await session.scalar(
        select_threads(ctx)
        .where(Message.thread_type == thread_type.value, Message.id.in_(with_recipient))
        .order_by(Message.created_at)
        .limit(1)
    )


async def start_thread(
    ctx: RequestContext, session: AsyncSession, body: MessageCreate
) -> JSONResponse | dict[str, Any]:
    """Start a thread with one or more members of the caller's organization.

    A one-to-one thread that already exists between the caller and the
    recipient is returned instead of creating a second one.

    Raises:
        ValidationFailed: If the caller is the only recipient
        NotFound: If a recipient is not a member of the caller's organization
    """
    recipient_ids = [rid for rid in body.recipients() if rid != ctx.user_id]
    if not recipient_ids:
        raise ValidationFailed("Cannot start a thread with yourself")

    recipients = (
        await session.scalars(
            select(User).where(
                User.id.in_(recipient_ids),
                User.org_id == ctx.org_id,
                User.deleted_at.is_(None),
            )
        )
    ).all()
    if len(recipients) != len(recipient_ids):
        raise NotFound("Recipient not found")

    if body.thread_type in ONE_TO_ONE and len(recipient_ids) == 1:
        existing = await _existing_one_to_one(ctx, session, body.thread_type, recipient_ids[0])
        if existing is not None:
            return {"message": serialize_message(existing)}

    message = Message(
        org_id=ctx.org_id,
        thread_type=body.thread_type.value,
        subject=body.subject,
        created_by=ctx.user_id,
    )
    session.add(message)
    await session.flush()

    session.add(
        MessageParticipant(
            org_id=ctx.org_id,
            message_id=message.id,
            user_id=ctx.user_id,
            unread=False,
            role=ctx.active_role.value if ctx.active_role is not None else None,
        )
    )
    for user in recipients:
        session.add(
            MessageParticipant(
                org_id=ctx.org_id,
                message_id=message.id,
                user_id=user.id,
                unread=True,
                role=user.role,
            )
        )
    await session.commit()
    await session.refresh(message)

    logger.info(
        "Started %s thread %s with %d recipient(s)",
        message.thread_type,
        message.id,
        len(recipients),
    )
    return created({"message": serialize_message(message)})


async def _own_thread(ctx: RequestContext, session: AsyncSession, message_id: uuid.UUID) -> Message:
    message = await session.scalar(select_threads(ctx).where(Message.id == message_id))
    if message is None:
        raise NotFound("Message not found or access denied")
    return message


async def update_thread(
    ctx: RequestContext, session: AsyncSession, body: MessageUpdate
) -> dict[str, Any]:
    """Change a thread's subject or deletion time.

    Raises:
        NotFound: If the caller does not take part in a live thread with that id
    """
    message = await _own_thread(ctx, session, body.id)
    if "subject" in body.model_fields_set:
        message.subject = body.subject
    if "deleted_at" in body.model_fields_set:
        message.deleted_at = body.deleted_at

    await session.commit()
    await session.refresh(message)
    return {"message": serialize_message(message)}


async def delete_thread(
    ctx: RequestContext, session: AsyncSession, query: MessageDeleteQuery
) -> dict[str, Any]:
    """Soft-delete a thread the caller takes part in."""
    message = await _own_thread(ctx, session, query.id)
    message.deleted_at = datetime.now(timezone.utc)
    await session.commit()
    return {"success": True}


async def _participation(
    ctx: RequestContext, session: AsyncSession, message_id: uuid.UUID
) -> MessageParticipant:
    participant = await session.scalar(
        select(MessageParticipant).where(
            MessageParticipant.message_id == message_id,
            MessageParticipant.user_id == ctx.user_id,
            MessageParticipant.org_id == ctx.org_id,
        )
    )
    if participant is None:
        raise Forbidden(THREAD_ACCESS_DENIED)
    return participant


async def list_items(
    ctx: RequestContext, session: AsyncSession, message_id: str, query: MessageItemQuery
) -> dict[str, Any]:
    """List a thread's items oldest first and mark the thread read for the caller.

    Raises:
        ValidationFailed: If the id is not a UUID
        Forbidden: If the caller does not take part in the thread
    """
    thread_id = parse_resource_id(message_id, "Invalid message ID")
    participant = await _participation(ctx, session, thread_id)

    rows = await session.execute(
        select(MessageItem, User)
        .outerjoin(User, User.id == MessageItem.author_id)
        .where(
            MessageItem.message_id == thread_id,
            MessageItem.org_id == ctx.org_id,
            MessageItem.deleted_at.is_(None),
        )
        .order_by(MessageItem.created_at)
        .offset(query.offset)
        .limit(query.limit)
    )
    items = [serialize_message_item(item, author) for item, author in rows.all()]

    if participant.unread:
        participant.unread = False
        await session.commit()
    return {"items": items}


async def post_item(
    ctx: RequestContext, session: AsyncSession, message_id: str, body: MessageItemCreate
) -> JSONResponse:
    """Add an item to a thread.

    Raises:
        ValidationFailed: If the id is not a UUID
        Forbidden: If the caller does not take part in the thread
        NotFound: If the thread has been deleted
    """
    thread_id = parse_resource_id(message_id, "Invalid message ID")
    await _participation(ctx, session, thread_id)

    message = await session.scalar(
        select(Message).where(
            Message.id == thread_id,
            Message.org_id == ctx.org_id,
            Message.deleted_at.is_(None),
        )
    )
    if message is None:
        raise NotFound("Message thread not found")

    item = MessageItem(
        org_id=ctx.org_id,
        message_id=thread_id,
        author_id=ctx.user_id,
        body=body.body,
        attachments=body.attachments,
    )
    session.add(item)
    await session.execute(
        update(MessageParticipant)
        .where(
            MessageParticipant.message_id == thread_id,
            MessageParticipant.user_id != ctx.user_id,
        )
        .values(unread=True)
    )
    message.updated_at = datetime.now(timezone.utc)
    await session.commit()
    await session.refresh(item)

    author = await session.get(User, ctx.user_id)
    return created({"item": serialize_message_item(item, author)})
