"""
Campaign service for Campaign Dispatch application.
Runs the campaign control actions: local state is advanced first, then the
workflow endpoint is notified. A failed notification never rolls the local
state back, so a campaign can always be stopped locally.
"""

from datetime import datetime
from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple

from backend.core.logging import get_logger
from backend.db.repositories import (
    AssistantRepository, CampaignRepository, ClientGroupRepository,
    assistant_repository, campaign_repository, client_group_repository
)
from backend.models.campaign import Campaign, Client
from backend.schemas.assistant import AssistantRecord
from backend.schemas.campaign import CampaignActionResponse, CampaignCreate, CampaignResponse
from backend.schemas.dispatch import (
    ActionType, AdditionalData, CallRequest, CallResponse,
    DispatchContext, DispatchResult, ResolutionHints
)
from backend.services.dispatch_service import DispatchService
from backend.services.session_state import SelectionCache

logger = get_logger(__name__)

class CampaignService:
    """Service for campaign control actions"""

    def __init__(
        self,
        db: Session,
        dispatcher: DispatchService,
        selection: SelectionCache,
        campaigns: CampaignRepository = campaign_repository,
        groups: ClientGroupRepository = client_group_repository,
        assistants: AssistantRepository = assistant_repository,
    ):
        self.db = db
        self.dispatcher = dispatcher
        self.notifier = dispatcher.notifier
        self.selection = selection
        self.campaigns = campaigns
        self.groups = groups
        self.assistants = assistants

    async def create_campaign(self, owner_id: str, campaign_data: CampaignCreate) -> CampaignActionResponse:
        """
        Create a draft campaign for a client group and announce it.
        """
        group = self.groups.get_for_owner(self.db, group_id=campaign_data.client_group_id, user_id=owner_id)
        if not group:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client group not found")

        client_count = len(self.groups.get_clients(self.db, group_id=group.id))

        assistant = None
        if campaign_data.assistant_local_id:
            assistant = self._owned_assistant(owner_id, campaign_data.assistant_local_id)
            self.selection.set(assistant)

        campaign = self.campaigns.create(self.db, obj_in={
            "name": campaign_data.name,
            "user_id": owner_id,
            "status": "draft",
            "client_group_id": group.id,
            "assistant_id": assistant.local_id if assistant else None,
            "total_calls": client_count,
            "answered_calls": 0,
        })
        logger.info(f"Campaign {campaign.id} created with {client_count} clients")

        result = await self.dispatcher.dispatch(ActionType.CREATE_CAMPAIGN, DispatchContext(
            campaign_id=campaign.id,
            owner_id=owner_id,
            hints=self._hints_for(assistant),
            data=AdditionalData(
                campaign_name=campaign.name,
                client_count=client_count,
                ai_profile=assistant.name if assistant else "Default Assistant",
                client_group=group.name,
            ),
        ))

        if result.accepted:
            self.notifier.success("Your new campaign is ready to start.")
        else:
            self.notifier.warning("Campaign created, but the call system could not be notified.")
        return self._response(campaign, result)

    async def start_campaign(self, owner_id: str, campaign_id: int) -> CampaignActionResponse:
        """
        Mark the campaign active, announce it, then place one call per client.
        """
        campaign = self._get_owned(owner_id, campaign_id)
        campaign = self.campaigns.update(self.db, db_obj=campaign, obj_in={
            "status": "active",
            "start_date": datetime.utcnow(),
        })

        clients = self._clients_of(campaign)
        assistant = self._campaign_assistant(campaign)

        result = await self.dispatcher.dispatch(ActionType.START_CAMPAIGN, DispatchContext(
            campaign_id=campaign.id,
            owner_id=owner_id,
            hints=self._hints_for(assistant),
            data=AdditionalData(
                campaign_name=campaign.name,
                client_count=len(clients) if campaign.client_group_id else campaign.total_calls,
                ai_profile=assistant.name if assistant else "Default Assistant",
            ),
        ))

        # Reuse the resolved assistant for every call of this campaign
        call_hints = self._hints_for(assistant)
        if result.resolution:
            call_hints = ResolutionHints(
                remote_id=result.resolution.remote_id,
                local_id=result.resolution.local_id,
                name=result.resolution.name,
            )

        successful, failed = await self._call_clients(owner_id, campaign, clients, call_hints)

        if failed == 0:
            self.notifier.success(f"Campaign started: {successful} calls sent.")
        else:
            self.notifier.warning(
                f"Campaign partially started: {successful} calls sent, {failed} failed. Check the logs."
            )
        return self._response(campaign, result, successful_calls=successful, failed_calls=failed)

    async def pause_campaign(self, owner_id: str, campaign_id: int) -> CampaignActionResponse:
        """
        Mark the campaign paused and announce it.
        """
        campaign = self._get_owned(owner_id, campaign_id)
        campaign = self.campaigns.update(self.db, db_obj=campaign, obj_in={"status": "paused"})

        result = await self.dispatcher.dispatch(ActionType.PAUSE_CAMPAIGN, DispatchContext(
            campaign_id=campaign.id,
            owner_id=owner_id,
            hints=self._hints_for(self._campaign_assistant(campaign)),
            data=AdditionalData(campaign_name=campaign.name, progress=campaign.progress),
        ))

        if result.accepted:
            self.notifier.success("Campaign paused. You can resume it at any time.")
        else:
            self.notifier.warning("Campaign paused, but there was an error notifying the call system.")
        return self._response(campaign, result)

    async def stop_campaign(self, owner_id: str, campaign_id: int) -> CampaignActionResponse:
        """
        Mark the campaign stopped and announce it.

        The campaign stays stopped even when the announcement fails.
        """
        campaign = self._get_owned(owner_id, campaign_id)
        campaign = self.campaigns.update(self.db, db_obj=campaign, obj_in={
            "status": "stopped",
            "end_date": datetime.utcnow(),
        })

        result = await self.dispatcher.dispatch(ActionType.STOP_CAMPAIGN, DispatchContext(
            campaign_id=campaign.id,
            owner_id=owner_id,
            hints=self._hints_for(self._campaign_assistant(campaign)),
            data=AdditionalData(
                campaign_name=campaign.name,
                progress=campaign.progress,
                completed_calls=campaign.answered_calls,
            ),
        ))

        if result.accepted:
            self.notifier.success("Your call campaign was stopped.")
        else:
            logger.warning(f"Campaign {campaign.id} stopped locally without notifying the call system")
            self.notifier.warning("Campaign stopped, but there was an error notifying the call system.")
        return self._response(campaign, result)

    async def make_call(self, owner_id: str, call: CallRequest) -> CallResponse:
        """
        Place a single manual call with the selected assistant.
        """
        self._get_owned(owner_id, call.campaign_id)

        selected = self.selection.get()
        hints = ResolutionHints()
        if selected:
            hints = ResolutionHints(local_id=selected.local_id, name=selected.name)

        result = await self.dispatcher.dispatch(ActionType.INITIATE_CALL, DispatchContext(
            campaign_id=call.campaign_id,
            client_id=call.client_id,
            client_phone=call.client_phone,
            owner_id=owner_id,
            hints=hints,
            data=AdditionalData(source="manual_call"),
        ))

        if result.accepted:
            self.notifier.success("Call started successfully")
            return CallResponse(success=True, message="Call started successfully", dispatch=result)
        return CallResponse(success=False, message="Failed to start call", dispatch=result)

    async def _call_clients(
        self,
        owner_id: str,
        campaign: Campaign,
        clients: List[Client],
        hints: ResolutionHints,
    ) -> Tuple[int, int]:
        successful = failed = 0
        for client in clients:
            if not client.phone:
                logger.warning(f"Client {client.id} has no phone number, skipping")
                failed += 1
                continue

            result = await self.dispatcher.dispatch(ActionType.INITIATE_CALL, DispatchContext(
                campaign_id=campaign.id,
                client_id=client.id,
                client_name=client.name,
                client_phone=client.phone,
                owner_id=owner_id,
                hints=hints,
                data=AdditionalData(campaign_name=campaign.name, source="campaign"),
            ))
            if result.accepted:
                successful += 1
            else:
                failed += 1

        logger.info(f"Campaign {campaign.id}: {successful} calls sent, {failed} failed")
        return successful, failed

    def _get_owned(self, owner_id: str, campaign_id: int) -> Campaign:
        campaign = self.campaigns.get_for_owner(self.db, campaign_id=campaign_id, user_id=owner_id)
        if not campaign:
            logger.warning(f"Campaign not found: {campaign_id} for user {owner_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Campaign not found")
        return campaign

    def _owned_assistant(self, owner_id: str, local_id: str) -> AssistantRecord:
        record = self.assistants.get_record(self.db, local_id)
        if not record or record.owner_id != owner_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assistant not found")
        return record

    def _campaign_assistant(self, campaign: Campaign) -> Optional[AssistantRecord]:
        if not campaign.assistant_id:
            return None
        return self.assistants.get_record(self.db, campaign.assistant_id)

    def _clients_of(self, campaign: Campaign) -> List[Client]:
        if not campaign.client_group_id:
            return []
        return self.groups.get_clients(self.db, group_id=campaign.client_group_id)

    @staticmethod
    def _hints_for(assistant: Optional[AssistantRecord]) -> ResolutionHints:
        if assistant is None:
            return ResolutionHints()
        return ResolutionHints(
            local_id=assistant.local_id,
            remote_id=assistant.remote_id,
            name=assistant.name,
        )

    @staticmethod
    def _response(campaign: Campaign, result: DispatchResult, **counts) -> CampaignActionResponse:
        return CampaignActionResponse(
            campaign=CampaignResponse.from_orm(campaign),
            dispatch=result,
            **counts,
        )
