from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import (
    get_current_viewer,
    get_optional_viewer,
    get_toggle_engine,
    get_view_builder,
)
from app.models import Predicate, TargetKind
from app.schemas import ApiResponse, ChannelSummary, OwnerSummary, SubscriptionState
from app.services import AggregateViewBuilder, ToggleEngine

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("/u/{channel_id}", response_model=ApiResponse[SubscriptionState])
@router.post("/{channel_id}", response_model=ApiResponse[SubscriptionState])
async def toggle_subscription(
    channel_id: str,
    viewer_id: UUID = Depends(get_current_viewer),
    engine: ToggleEngine = Depends(get_toggle_engine),
):
    """Subscribe to the channel, or unsubscribe if already subscribed."""
    result = await engine.toggle(viewer_id, Predicate.SUBSCRIBE, TargetKind.CHANNEL, channel_id)
    message = "Subscribed successfully" if result.active else "Subscription deleted successfully"
    return ApiResponse.build(
        SubscriptionState(is_subscribed=result.active, subscribers_count=result.count), message
    )


@router.get("/u/{channel_id}", response_model=ApiResponse[List[OwnerSummary]])
async def get_channel_subscribers(
    channel_id: str,
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    subscribers = await views.channel_subscribers(channel_id)
    return ApiResponse.build(
        subscribers,
        "Subscribers fetched successfully",
        meta={"subscribersCount": len(subscribers)},
    )


@router.get("/s/{channel_id}", response_model=ApiResponse[SubscriptionState])
async def get_subscription_status(
    channel_id: str,
    viewer_id: Optional[UUID] = Depends(get_optional_viewer),
    engine: ToggleEngine = Depends(get_toggle_engine),
):
    result = await engine.status(viewer_id, Predicate.SUBSCRIBE, TargetKind.CHANNEL, channel_id)
    return ApiResponse.build(
        SubscriptionState(is_subscribed=result.active, subscribers_count=result.count),
        "Subscription status fetched successfully",
    )


@router.get("/c/{subscriber_id}", response_model=ApiResponse[List[ChannelSummary]])
async def get_subscribed_channels(
    subscriber_id: str,
    views: AggregateViewBuilder = Depends(get_view_builder),
):
    """Channels the given user subscribes to, each with its subscriber count."""
    channels = await views.subscribed_channels(subscriber_id)
    return ApiResponse.build(
        channels,
        "Subscribed channels fetched successfully",
        meta={"subscribedToCount": len(channels)},
    )
