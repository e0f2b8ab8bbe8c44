"""Entity whose columns carry XML/JSON serialization metadata."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from panache_it.database import Base
from panache_it.orm import ActiveRecord
from panache_it.serialization.metadata import (
    json_property,
    serialization_info,
    xml_attribute,
    xml_element,
    xml_transient,
)


class JAXBEntity(ActiveRecord, Base):
    __tablename__ = "jaxb_entity"

    named_annotated: Mapped[str | None] = mapped_column(
        String(255), nullable=True, info=serialization_info(xml_element("annotated"))
    )
    named_attribute: Mapped[str | None] = mapped_column(
        String(255), nullable=True, info=serialization_info(xml_attribute("attribute"))
    )
    transient_field: Mapped[str | None] = mapped_column(
        String(255), nullable=True, info=serialization_info(xml_transient())
    )
    renamed: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        info=serialization_info(json_property("jsonName"), xml_element("xmlName")),
    )
    unannotated: Mapped[str | None] = mapped_column(String(255), nullable=True)
