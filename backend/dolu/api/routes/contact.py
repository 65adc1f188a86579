"""
Public Contact Form Route
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dolu.db.database import get_db
from dolu.schemas import ContactMessageCreate
from dolu.services import contact

router = APIRouter()


@router.post("", status_code=201)
async def submit_contact_message(data: ContactMessageCreate, db: AsyncSession = Depends(get_db)):
    message = await contact.submit_contact_message(db, data)
    return {"id": message.id, "status": "received"}
