import re

from sqlalchemy import Column, Integer, String, Text, Enum

from common.enums import EnquiryStatus
from db_domains import CreateUpdateTime


class Enquiry(CreateUpdateTime):
    __tablename__ = "enquiries"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(100), nullable=False, index=True)
    phone_number = Column(String(15), nullable=True)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(Enum(EnquiryStatus), default=EnquiryStatus.new, nullable=False, index=True)

    def __repr__(self):
        return f"<Enquiry id={self.id} email={self.email} status={self.status}>"

    @classmethod
    def is_valid_email(cls, email: str) -> bool:
        return bool(re.fullmatch(r"[^@]+@[^@]+\.[^@]+", email)) if email else True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        if not self.is_valid_email(self.email):
            raise ValueError(f"Invalid email address: {self.email}")
