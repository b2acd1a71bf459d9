"""Ghost CMS integration."""

from ...sdk import AuthSchema, FormBuilder, Integration, IntegrationMetadata
from .actions import CreateMemberAction, CreatePostAction, ListPostsAction, UpdatePostAction
from .client import GhostClient, generate_admin_token
from .triggers import NewPostTrigger


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="ghostcms",
            name="Ghost CMS",
            description="Publish posts and manage members on a Ghost site.",
            icon="simple-icons:ghost",
            categories=("content-management",),
        ),
        auth=AuthSchema.custom(
            FormBuilder("ghostcms-auth", "Ghost CMS")
            .url("site_url", "Site URL", required=True, placeholder="https://example.ghost.io")
            .secret(
                "admin_api_key",
                "Admin API Key",
                required=True,
                description="From Settings > Integrations, in the form <id>:<secret>.",
            )
            .build(),
        ),
        actions=(
            CreatePostAction(),
            UpdatePostAction(),
            ListPostsAction(),
            CreateMemberAction(),
        ),
        triggers=(NewPostTrigger(),),
    )


__all__ = ["GhostClient", "create_integration", "generate_admin_token"]
