"""Messages that transform a bill session"""
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field

from billsplit.schemas.bill import BillSession
from billsplit.schemas.common import CamelModel, Money, Quantity, RequiredName
from billsplit.utils.coercion import MAX_TEXT_LENGTH


class AddParticipantAction(CamelModel):
    type: Literal["add_participant"] = "add_participant"
    name: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH)


class RenameParticipantAction(CamelModel):
    type: Literal["rename_participant"] = "rename_participant"
    participant_id: str
    name: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH)


class RemoveParticipantAction(CamelModel):
    type: Literal["remove_participant"] = "remove_participant"
    participant_id: str


class ToggleAssignmentAction(CamelModel):
    type: Literal["toggle_assignment"] = "toggle_assignment"
    item_id: str
    participant_id: str


class AssignItemAction(CamelModel):
    type: Literal["assign_item"] = "assign_item"
    item_id: str
    participant_ids: List[str]


class AddItemAction(CamelModel):
    type: Literal["add_item"] = "add_item"
    name: RequiredName
    unit_price: Money
    quantity: Quantity = 1


class UpdateItemAction(CamelModel):
    """Edit an item; omitted fields keep their value"""

    type: Literal["update_item"] = "update_item"
    item_id: str
    name: Optional[RequiredName] = None
    unit_price: Optional[Money] = None
    quantity: Optional[Quantity] = None


class DeleteItemAction(CamelModel):
    type: Literal["delete_item"] = "delete_item"
    item_id: str


class SetChargesAction(CamelModel):
    """Replace the bill-level tax and/or tip"""

    type: Literal["set_charges"] = "set_charges"
    tax: Optional[Money] = None
    tip: Optional[Money] = None


BillAction = Annotated[
    Union[
        AddParticipantAction,
        RenameParticipantAction,
        RemoveParticipantAction,
        ToggleAssignmentAction,
        AssignItemAction,
        AddItemAction,
        UpdateItemAction,
        DeleteItemAction,
        SetChargesAction,
    ],
    Field(discriminator="type"),
]


class BillActionRequest(CamelModel):
    """A bill snapshot and the action to apply to it"""

    bill: BillSession
    action: BillAction
