"""
ماژول مدل خطاهای خزش

خطاهای محلی هر شاخه پیمایش علاوه بر لاگ، در این جدول نیز ثبت می‌شوند.
"""

from sqlalchemy import Column, String, Text, Enum

from models.base import BaseModel, IdType

ERROR_LEVELS = ('fetch', 'parse', 'author', 'book', 'chapter', 'segment')


class ScrapingError(BaseModel):
    """مدل داده برای خطای ثبت‌شده هنگام خزش"""

    __tablename__ = 'scraping_errors'

    id = Column(IdType, primary_key=True, autoincrement=True)
    url = Column(String(512), nullable=False)
    error_message = Column(Text, nullable=False)
    stack_trace = Column(Text, nullable=True)
    level = Column(Enum(*ERROR_LEVELS, name='scraping_error_level'), nullable=False)
