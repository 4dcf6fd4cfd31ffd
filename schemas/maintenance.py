"""
Pydantic schemas for maintenance workflow API.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models import MaintenanceCategory, MaintenancePriority, MaintenanceStatus


class MaintenanceCreate(BaseModel):
     property_id: int = Field(..., gt=0)
     tenant_id: Optional[int] = Field(None, gt=0, description="Omit for landlord-initiated work")
     title: str = Field(..., min_length=1, max_length=255)
     description: Optional[str] = None
     category: MaintenanceCategory
     priority: MaintenancePriority = MaintenancePriority.MEDIUM

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "property_id": 1,
                    "tenant_id": 3,
                    "title": "Kitchen sink leaking",
                    "category": "plumbing",
                    "priority": "high"
               }
          }
     )


class MaintenanceAssign(BaseModel):
     assigned_to: str = Field(..., min_length=1, max_length=200)
     assigned_contact: Optional[str] = Field(None, max_length=100)


class MaintenanceSchedule(BaseModel):
     scheduled_date: date
     estimated_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


class MaintenanceComplete(BaseModel):
     resolution_notes: Optional[str] = None
     actual_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


class MaintenanceCancel(BaseModel):
     reason: str = Field(..., min_length=1)


class MaintenanceResponse(BaseModel):
     id: int
     property_id: int
     tenant_id: Optional[int] = None
     landlord_id: int
     title: str
     description: Optional[str] = None
     category: MaintenanceCategory
     priority: MaintenancePriority
     status: MaintenanceStatus
     assigned_to: Optional[str] = None
     assigned_contact: Optional[str] = None
     scheduled_date: Optional[date] = None
     estimated_cost: Optional[Decimal] = None
     actual_cost: Optional[Decimal] = None
     resolution_notes: Optional[str] = None
     completed_at: Optional[datetime] = None
     cancellation_reason: Optional[str] = None
     cancelled_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class MaintenanceListResponse(BaseModel):
     requests: List[MaintenanceResponse]
     total: int


class MaintenanceCommentCreate(BaseModel):
     comment: str = Field(..., min_length=1)
     is_internal: bool = Field(False, description="Landlord-only note, hidden from the tenant")


class MaintenanceCommentResponse(BaseModel):
     id: int
     maintenance_id: int
     user_id: int
     author_name: Optional[str] = None
     comment: str
     is_internal: bool
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class MaintenanceCommentListResponse(BaseModel):
     comments: List[MaintenanceCommentResponse]
     total: int
