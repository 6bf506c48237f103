"""
ماژول عملیات پایگاه داده برای خزشگر کتابخانه متون

این ماژول شامل کلاس پایه برای عملیات افزودنی (ایجاد، بازیابی، شمارش،
دریافت‌یا‌ایجاد و درج با نادیده‌گرفتن تکراری‌ها) بر روی جداول است.
"""

from sqlalchemy import insert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from utils.logger import get_logger
from database.connection import DatabaseConnection

# تنظیم لاگر
logger = get_logger(__name__)


class BaseDBOperations:
    """کلاس پایه برای عملیات پایگاه داده"""

    def __init__(self, db=None):
        """
        مقداردهی اولیه با ایجاد اتصال به پایگاه داده

        Args:
            db: نمونه DatabaseConnection (پیش‌فرض: نمونه Singleton)
        """
        self.db = db or DatabaseConnection()

    def create(self, model_instance):
        """
        ایجاد یک رکورد جدید در پایگاه داده

        Args:
            model_instance: نمونه‌ای از یک کلاس مدل SQLAlchemy

        Returns:
            model_instance: نمونه افزوده شده به پایگاه داده، یا None در صورت خطا
        """
        session = self.db.get_session()
        try:
            session.add(model_instance)
            session.commit()
            session.refresh(model_instance)
            return model_instance
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"خطا در ایجاد رکورد: {str(e)}")
            return None
        finally:
            session.close()

    def get_by_id(self, model_class, id_value):
        """
        بازیابی یک رکورد با شناسه مشخص

        Args:
            model_class: کلاس مدل SQLAlchemy
            id_value: مقدار شناسه برای جستجو

        Returns:
            model_instance: نمونه یافت شده، یا None در صورت عدم وجود
        """
        session = self.db.get_session()
        try:
            return session.query(model_class).filter(model_class.id == id_value).first()
        except SQLAlchemyError as e:
            logger.error(f"خطا در بازیابی رکورد با شناسه {id_value}: {str(e)}")
            return None
        finally:
            session.close()

    def get_all(self, model_class, skip=0, limit=100, order_by=None, **filters):
        """
        بازیابی رکوردهای یک مدل با اعمال فیلترهای اختیاری

        Args:
            model_class: کلاس مدل SQLAlchemy
            skip: تعداد رکوردهایی که باید از ابتدا رد شوند
            limit: حداکثر تعداد رکوردها (None برای همه)
            order_by: ستون مرتب‌سازی (پیش‌فرض: شناسه)
            **filters: فیلترهای اختیاری به صورت keyword arguments

        Returns:
            list: لیستی از نمونه‌های یافت شده
        """
        session = self.db.get_session()
        try:
            query = session.query(model_class)

            for attr, value in filters.items():
                if hasattr(model_class, attr):
                    query = query.filter(getattr(model_class, attr) == value)

            query = query.order_by(order_by if order_by is not None else model_class.id)
            query = query.offset(skip)
            if limit is not None:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as e:
            logger.error(f"خطا در بازیابی رکوردها: {str(e)}")
            return []
        finally:
            session.close()

    def count(self, model_class, **filters):
        """
        شمارش تعداد رکوردهای یک مدل با اعمال فیلترهای اختیاری

        Returns:
            int: تعداد رکوردهای یافت شده
        """
        session = self.db.get_session()
        try:
            query = session.query(model_class)

            for attr, value in filters.items():
                if hasattr(model_class, attr):
                    query = query.filter(getattr(model_class, attr) == value)

            return query.count()
        except SQLAlchemyError as e:
            logger.error(f"خطا در شمارش رکوردها: {str(e)}")
            return 0
        finally:
            session.close()

    def get_or_create(self, model_class, defaults=None, **lookup):
        """
        بازیابی رکورد با کلید یکتا یا ایجاد آن در صورت نبود

        اگر درج به دلیل تداخل کلید یکتا شکست بخورد، تراکنش برگردانده می‌شود
        و رکورد موجود دوباره خوانده می‌شود.

        Args:
            model_class: کلاس مدل SQLAlchemy
            defaults: مقادیر ستون‌های غیرکلیدی برای رکورد جدید
            **lookup: ستون‌های کلید یکتا

        Returns:
            tuple: (نمونه یا None در صورت خطا، آیا رکورد جدید ایجاد شد؟)
        """
        session = self.db.get_session()
        try:
            instance = session.query(model_class).filter_by(**lookup).first()
            if instance is not None:
                return instance, False

            instance = model_class(**lookup, **(defaults or {}))
            session.add(instance)
            session.commit()
            session.refresh(instance)
            return instance, True

        except IntegrityError:
            session.rollback()
            logger.debug(f"تداخل کلید یکتا در {model_class.__name__} {lookup}؛ بازخوانی رکورد موجود")
            try:
                return session.query(model_class).filter_by(**lookup).first(), False
            except SQLAlchemyError as e:
                logger.error(f"خطا در بازخوانی رکورد {model_class.__name__}: {str(e)}")
                return None, False

        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"خطا در دریافت یا ایجاد رکورد {model_class.__name__}: {str(e)}")
            return None, False

        finally:
            session.close()

    def _insert_ignore_statement(self, model_class):
        dialect = self.db.get_engine().dialect.name
        if dialect == 'sqlite':
            return insert(model_class).prefix_with('OR IGNORE')
        if dialect in ('mysql', 'mariadb'):
            return insert(model_class).prefix_with('IGNORE')
        if dialect == 'postgresql':
            return postgresql_insert(model_class).on_conflict_do_nothing()
        raise NotImplementedError(f"درج با نادیده‌گرفتن تکراری‌ها برای {dialect} پشتیبانی نمی‌شود")

    def insert_ignore(self, model_class, rows):
        """
        درج دسته‌ای رکوردها؛ رکوردهایی که کلید یکتای آن‌ها موجود است نادیده گرفته می‌شوند

        Args:
            model_class: کلاس مدل SQLAlchemy
            rows: لیستی از دیکشنری‌های مقادیر ستون‌ها

        Returns:
            bool: True در صورت موفقیت، False در صورت شکست
        """
        if not rows:
            return True

        session = self.db.get_session()
        try:
            session.execute(self._insert_ignore_statement(model_class), rows)
            session.commit()
            return True
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"خطا در درج دسته‌ای {model_class.__name__}: {str(e)}")
            return False
        finally:
            session.close()
