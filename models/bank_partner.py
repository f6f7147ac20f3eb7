from sqlalchemy import Column, Integer, String, Boolean

from db_domains import CreateUpdateTime, CreateByUpdateBy


class BankPartner(CreateUpdateTime, CreateByUpdateBy):
    __tablename__ = "bank_partners"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    logo_url = Column(String(500), nullable=True)
    contact_person_name = Column(String(255), nullable=True)
    contact_person_email = Column(String(100), nullable=True)
    contact_person_phone = Column(String(15), nullable=True)
    is_active = Column(Boolean, default=True, index=True)

    def __repr__(self):
        return f"<BankPartner id={self.id} name={self.name} active={self.is_active}>"
