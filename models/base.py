"""
ماژول پایه برای مدل‌های داده در خزشگر کتابخانه متون

این ماژول شامل کلاس پایه برای تمام مدل‌های داده است که ویژگی‌های مشترک
و متدهای کمکی را فراهم می‌کند. رکوردها فقط افزودنی هستند و به‌روزرسانی
یا حذف نمی‌شوند.
"""

from datetime import datetime
from sqlalchemy import Column, BigInteger, Integer, DateTime, inspect

from database.connection import Base

# شناسه‌ها در MySQL از نوع BIGINT و در SQLite از نوع INTEGER (برای افزایش خودکار)
IdType = BigInteger().with_variant(Integer, 'sqlite')


class BaseModel(Base):
    """کلاس پایه برای تمام مدل‌های داده در سیستم"""

    __abstract__ = True

    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        """
        تبدیل مدل به دیکشنری

        Returns:
            dict: یک دیکشنری از تمام ویژگی‌های مدل
        """
        result = {}
        for c in inspect(self).mapper.column_attrs:
            value = getattr(self, c.key)

            if isinstance(value, datetime):
                value = value.isoformat()

            result[c.key] = value

        return result

    def __repr__(self):
        attrs = []
        for c in inspect(self).mapper.column_attrs:
            if c.key in ('text', 'stack_trace'):  # متن‌های بلند نمایش داده نمی‌شوند
                continue
            value = getattr(self, c.key)
            if isinstance(value, str) and len(value) > 50:
                value = value[:47] + "..."
            attrs.append(f"{c.key}={value}")

        return f"<{self.__class__.__name__}({', '.join(attrs)})>"
