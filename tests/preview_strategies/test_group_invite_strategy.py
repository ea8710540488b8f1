import httpx
import pytest
from conftest import GROUP_INVITE_URL

from link_preview.core.errors import FetchFailureError, InvalidPreviewError
from link_preview.preview_strategies.group_invite_strategy import GroupInvitePreviewStrategy
from link_preview.services.groups import GroupInviteLinkPreview


@pytest.fixture
def group_with_avatar(groups_service, make_image):
    groups_service.preview = GroupInviteLinkPreview(title="Book Club", avatar_url_path="groups/avatar/1")
    groups_service.avatar = make_image("JPEG", (200, 200))
    return groups_service


@pytest.mark.asyncio
async def test_group_preview_has_title_and_avatar(group_with_avatar):
    draft = await GroupInvitePreviewStrategy(group_with_avatar).build_draft(GROUP_INVITE_URL)

    assert draft.title == "Book Club"
    assert draft.image_data == group_with_avatar.avatar
    assert draft.image_mime_type == "image/jpeg"


@pytest.mark.asyncio
async def test_group_preview_is_never_served_from_cache(groups_service):
    await GroupInvitePreviewStrategy(groups_service).build_draft(GROUP_INVITE_URL)

    (call,) = groups_service.preview_calls
    assert call["allow_cached"] is False
    assert call["invite_link_password"] == b"\x02" * 16
    assert call["group_secret_params"] == b"secret:" + b"\x01" * 32


@pytest.mark.asyncio
async def test_group_without_avatar_has_no_image(groups_service):
    draft = await GroupInvitePreviewStrategy(groups_service).build_draft(GROUP_INVITE_URL)

    assert draft.title == "Book Club"
    assert not draft.has_image


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "avatar_error",
    [
        httpx.ConnectError("reset"),
        FetchFailureError("avatar download failed"),
        RuntimeError("unexpected"),
    ],
)
async def test_avatar_failures_are_swallowed(group_with_avatar, avatar_error, mocker):
    group_with_avatar.avatar_error = avatar_error
    log_error = mocker.patch("link_preview.preview_strategies.group_invite_strategy.log_error")

    draft = await GroupInvitePreviewStrategy(group_with_avatar).build_draft(GROUP_INVITE_URL)

    assert draft.title == "Book Club"
    assert draft.image_data is None
    log_error.assert_called_once()


@pytest.mark.asyncio
async def test_network_avatar_failure_logs_warning(group_with_avatar, mocker):
    import logging

    group_with_avatar.avatar_error = httpx.ConnectError("reset")
    log_error = mocker.patch("link_preview.preview_strategies.group_invite_strategy.log_error")

    await GroupInvitePreviewStrategy(group_with_avatar).build_draft(GROUP_INVITE_URL)

    assert log_error.call_args.kwargs["level"] == logging.WARNING


@pytest.mark.asyncio
async def test_unexpected_avatar_failure_logs_error(group_with_avatar, mocker):
    import logging

    group_with_avatar.avatar_error = KeyError("bad")
    log_error = mocker.patch("link_preview.preview_strategies.group_invite_strategy.log_error")

    await GroupInvitePreviewStrategy(group_with_avatar).build_draft(GROUP_INVITE_URL)

    assert log_error.call_args.kwargs["level"] == logging.ERROR


@pytest.mark.asyncio
async def test_unparsable_invite_link_is_invalid_preview(groups_service):
    groups_service.parse_result = None

    with pytest.raises(InvalidPreviewError):
        await GroupInvitePreviewStrategy(groups_service).build_draft(GROUP_INVITE_URL)
    assert groups_service.preview_calls == []


@pytest.mark.asyncio
async def test_context_derivation_failure_is_invalid_preview(groups_service):
    groups_service.derive_error = ValueError("bad master key")

    with pytest.raises(InvalidPreviewError):
        await GroupInvitePreviewStrategy(groups_service).build_draft(GROUP_INVITE_URL)
    assert groups_service.preview_calls == []


@pytest.mark.asyncio
async def test_preview_fetch_error_propagates(groups_service, mocker):
    mocker.patch.object(
        groups_service,
        "fetch_group_invite_link_preview",
        side_effect=PermissionError("invite revoked"),
    )

    with pytest.raises(PermissionError):
        await GroupInvitePreviewStrategy(groups_service).build_draft(GROUP_INVITE_URL)


@pytest.mark.asyncio
async def test_untitled_group_without_avatar_is_not_valid(groups_service):
    groups_service.preview = GroupInviteLinkPreview(title=None)

    draft = await GroupInvitePreviewStrategy(groups_service).build_draft(GROUP_INVITE_URL)

    assert not draft.is_valid()
