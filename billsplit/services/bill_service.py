"""Bill session business logic

A BillSession is an immutable snapshot. Every operation here takes a snapshot
and returns a new one; the caller decides where the new snapshot lives.
"""
import logging
from decimal import Decimal
from typing import Callable, Iterable, List, Optional
from uuid import uuid4

from billsplit.core.exceptions import ConflictError, NotFoundError, ValidationError
from billsplit.schemas.bill import BillItem, BillSession, Participant, PersonSummary
from billsplit.schemas.bill_action import (AddItemAction, AddParticipantAction,
                                           AssignItemAction, BillAction,
                                           DeleteItemAction,
                                           RemoveParticipantAction,
                                           RenameParticipantAction,
                                           SetChargesAction,
                                           ToggleAssignmentAction,
                                           UpdateItemAction)
from billsplit.schemas.receipt import Receipt
from billsplit.services.split_calculator import SplitCalculator
from billsplit.utils.coercion import MAX_TEXT_LENGTH, strip_markup

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Generate an opaque unique identifier"""
    return str(uuid4())


class BillService:
    """Service for bill session operations"""

    @staticmethod
    def from_receipt(receipt: Receipt) -> BillSession:
        """
        Start a bill session from a validated receipt.

        Each receipt item gets a fresh id, no assignees and
        manually_edited=False.

        Args:
            receipt: Validated receipt

        Returns:
            New bill session without participants
        """
        items = [
            BillItem(
                id=new_id(),
                name=receipt_item.name,
                unit_price=receipt_item.price,
                quantity=receipt_item.quantity,
            )
            for receipt_item in receipt.items
        ]
        return BillSession(
            merchant_name=receipt.merchant_name,
            currency=receipt.currency,
            items=items,
            subtotal=receipt.subtotal,
            tax=receipt.tax,
            tip=receipt.tip,
            total=receipt.total,
        )

    # Participants

    @staticmethod
    def validate_participant_name(
        session: BillSession, name: str, exclude_id: Optional[str] = None
    ) -> str:
        """
        Clean a participant name and check it is unique.

        Args:
            session: Current bill session
            name: Requested name
            exclude_id: Participant allowed to already hold the name

        Returns:
            Trimmed name without markup characters

        Raises:
            ValidationError: If the name is blank or too long
            ConflictError: If another participant has the name, ignoring case
        """
        trimmed = strip_markup(name).strip()
        if not trimmed:
            raise ValidationError("Participant name cannot be empty")
        if len(trimmed) > MAX_TEXT_LENGTH:
            raise ValidationError(
                f"Participant name cannot exceed {MAX_TEXT_LENGTH} characters"
            )

        folded = trimmed.casefold()
        for participant in session.participants:
            if participant.id != exclude_id and participant.name.casefold() == folded:
                raise ConflictError(f"Participant '{trimmed}' already exists")

        return trimmed

    @staticmethod
    def add_participant(session: BillSession, name: str) -> BillSession:
        """Add a participant with a fresh id"""
        trimmed = BillService.validate_participant_name(session, name)
        participant = Participant(id=new_id(), name=trimmed)
        return session.model_copy(
            update={"participants": [*session.participants, participant]}
        )

    @staticmethod
    def rename_participant(
        session: BillSession, participant_id: str, name: str
    ) -> BillSession:
        """Change a participant's display name"""
        BillService.get_participant(session, participant_id)
        trimmed = BillService.validate_participant_name(
            session, name, exclude_id=participant_id
        )
        participants = [
            participant.model_copy(update={"name": trimmed})
            if participant.id == participant_id else participant
            for participant in session.participants
        ]
        return session.model_copy(update={"participants": participants})

    @staticmethod
    def remove_participant(session: BillSession, participant_id: str) -> BillSession:
        """
        Remove a participant and strip them from every item.

        Items they shared with one other person become that person's
        individual items.

        Raises:
            NotFoundError: If the participant is not in the session
        """
        BillService.get_participant(session, participant_id)

        items = [
            item.model_copy(update={
                "assigned_participant_ids": [
                    assignee for assignee in item.assigned_participant_ids
                    if assignee != participant_id
                ]
            })
            if participant_id in item.assigned_participant_ids else item
            for item in session.items
        ]
        participants = [
            participant for participant in session.participants
            if participant.id != participant_id
        ]
        return session.model_copy(update={"items": items, "participants": participants})

    @staticmethod
    def get_participant(session: BillSession, participant_id: str) -> Participant:
        """
        Raises:
            NotFoundError: If the participant is not in the session
        """
        for participant in session.participants:
            if participant.id == participant_id:
                return participant
        raise NotFoundError(f"Participant {participant_id} not found")

    # Assignments

    @staticmethod
    def toggle_assignment(
        session: BillSession, item_id: str, participant_id: str
    ) -> BillSession:
        """Assign a participant to an item, or unassign them if already assigned"""
        BillService.get_participant(session, participant_id)

        def toggle(item: BillItem) -> BillItem:
            if participant_id in item.assigned_participant_ids:
                assignees = [
                    assignee for assignee in item.assigned_participant_ids
                    if assignee != participant_id
                ]
            else:
                assignees = [*item.assigned_participant_ids, participant_id]
            return item.model_copy(update={"assigned_participant_ids": assignees})

        return BillService._replace_item(session, item_id, toggle)

    @staticmethod
    def assign_item(
        session: BillSession, item_id: str, participant_ids: Iterable[str]
    ) -> BillSession:
        """
        Replace an item's assignees.

        Raises:
            NotFoundError: If the item or any participant is not in the session
        """
        assignees = list(dict.fromkeys(participant_ids))
        for participant_id in assignees:
            BillService.get_participant(session, participant_id)

        return BillService._replace_item(
            session,
            item_id,
            lambda item: item.model_copy(update={"assigned_participant_ids": assignees}),
        )

    # Items

    @staticmethod
    def add_item(
        session: BillSession, name: str, unit_price: Decimal, quantity: int = 1
    ) -> BillSession:
        """Add a manually entered item"""
        item = BillItem(
            id=new_id(),
            name=name,
            unit_price=unit_price,
            quantity=quantity,
            manually_edited=True,
        )
        return session.model_copy(update={"items": [*session.items, item]})

    @staticmethod
    def update_item(
        session: BillSession,
        item_id: str,
        name: Optional[str] = None,
        unit_price: Optional[Decimal] = None,
        quantity: Optional[int] = None
    ) -> BillSession:
        """Edit an item's name, price or quantity and mark it manually edited"""
        updates = {"manually_edited": True}
        if name is not None:
            updates["name"] = name
        if unit_price is not None:
            updates["unit_price"] = unit_price
        if quantity is not None:
            updates["quantity"] = quantity

        return BillService._replace_item(
            session, item_id, lambda item: item.model_copy(update=updates)
        )

    @staticmethod
    def delete_item(session: BillSession, item_id: str) -> BillSession:
        """
        Raises:
            NotFoundError: If the item is not in the session
        """
        BillService.get_item(session, item_id)
        items = [item for item in session.items if item.id != item_id]
        return session.model_copy(update={"items": items})

    @staticmethod
    def get_item(session: BillSession, item_id: str) -> BillItem:
        """
        Raises:
            NotFoundError: If the item is not in the session
        """
        for item in session.items:
            if item.id == item_id:
                return item
        raise NotFoundError(f"Item {item_id} not found")

    @staticmethod
    def _replace_item(
        session: BillSession, item_id: str, change: Callable[[BillItem], BillItem]
    ) -> BillSession:
        BillService.get_item(session, item_id)
        items = [
            change(item) if item.id == item_id else item
            for item in session.items
        ]
        return session.model_copy(update={"items": items})

    # Charges

    @staticmethod
    def set_charges(
        session: BillSession,
        tax: Optional[Decimal] = None,
        tip: Optional[Decimal] = None
    ) -> BillSession:
        """Replace bill-level tax and/or tip"""
        updates = {}
        if tax is not None:
            updates["tax"] = tax
        if tip is not None:
            updates["tip"] = tip
        return session.model_copy(update=updates)

    # Dispatch

    @staticmethod
    def apply(session: BillSession, action: BillAction) -> BillSession:
        """
        Apply an action message to a session.

        Args:
            session: Current bill session
            action: One of the BillAction messages

        Returns:
            New bill session

        Raises:
            ValidationError: If the action type is not recognized
        """
        handlers = {
            AddParticipantAction: lambda: BillService.add_participant(
                session, action.name
            ),
            RenameParticipantAction: lambda: BillService.rename_participant(
                session, action.participant_id, action.name
            ),
            RemoveParticipantAction: lambda: BillService.remove_participant(
                session, action.participant_id
            ),
            ToggleAssignmentAction: lambda: BillService.toggle_assignment(
                session, action.item_id, action.participant_id
            ),
            AssignItemAction: lambda: BillService.assign_item(
                session, action.item_id, action.participant_ids
            ),
            AddItemAction: lambda: BillService.add_item(
                session, action.name, action.unit_price, action.quantity
            ),
            UpdateItemAction: lambda: BillService.update_item(
                session, action.item_id, action.name, action.unit_price, action.quantity
            ),
            DeleteItemAction: lambda: BillService.delete_item(session, action.item_id),
            SetChargesAction: lambda: BillService.set_charges(
                session, action.tax, action.tip
            ),
        }

        handler = handlers.get(type(action))
        if handler is None:
            raise ValidationError(f"Unknown bill action: {type(action).__name__}")

        logger.debug("Applying %s", action.type)
        return handler()

    # Splitting

    @staticmethod
    def calculate(session: BillSession) -> List[PersonSummary]:
        """Run the split calculator on a session"""
        return SplitCalculator.calculate_splits(
            session.items,
            session.participants,
            session.subtotal,
            session.tax,
            session.tip,
        )

    @staticmethod
    def finalize(session: BillSession) -> List[PersonSummary]:
        """
        Calculate the final split once every item has an owner.

        Raises:
            ValidationError: If there are no participants or an item is unassigned
        """
        if not session.participants:
            raise ValidationError("Add at least one participant before finalizing")

        unassigned = [item.name for item in session.items if not item.is_assigned]
        if unassigned:
            raise ValidationError(
                "Please assign all items to at least one person",
                details={"unassigned_items": unassigned},
            )

        return BillService.calculate(session)
