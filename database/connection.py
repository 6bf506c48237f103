"""
ماژول مدیریت اتصال به پایگاه داده برای خزشگر کتابخانه متون

این ماژول مسئول ایجاد و مدیریت اتصال به پایگاه داده (MySQL در محیط اجرا
و SQLite برای آزمون‌ها) است و از SQLAlchemy برای ایجاد واسط استفاده می‌کند.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool
from sqlalchemy.exc import SQLAlchemyError

from config.settings import DB_CONFIG, get_connection_string
from utils.logger import get_logger

# تنظیم لاگر
logger = get_logger(__name__)

# پایه برای تعریف مدل‌ها
Base = declarative_base()


class DatabaseConnection:
    """کلاس مدیریت اتصال به پایگاه داده"""

    _instance = None

    def __new__(cls, connection_string=None):
        """پیاده‌سازی الگوی Singleton برای اطمینان از وجود تنها یک نمونه از کلاس"""
        if cls._instance is None:
            cls._instance = super(DatabaseConnection, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, connection_string=None):
        """
        مقداردهی اولیه اتصال به پایگاه داده

        Args:
            connection_string: رشته اتصال SQLAlchemy (پیش‌فرض: از تنظیمات)
        """
        if self._initialized:
            return

        self.connection_string = connection_string or get_connection_string()

        try:
            self.engine = create_engine(self.connection_string, **self._engine_options(self.connection_string))

            session_factory = sessionmaker(bind=self.engine)
            self.SessionLocal = scoped_session(session_factory)

            logger.info(f"اتصال به پایگاه داده {self.engine.url.database or 'memory'} "
                        f"({self.engine.url.get_backend_name()}) با موفقیت برقرار شد")
            self._initialized = True

        except SQLAlchemyError as e:
            logger.error(f"خطا در اتصال به پایگاه داده: {str(e)}")
            raise

    @staticmethod
    def _engine_options(connection_string):
        """تنظیمات موتور بر اساس نوع پایگاه داده"""
        if connection_string.startswith('sqlite'):
            options = {'echo': False, 'connect_args': {'check_same_thread': False}}
            if ':memory:' in connection_string or connection_string.rstrip('/') == 'sqlite:':
                # پایگاه داده حافظه‌ای باید یک اتصال مشترک داشته باشد
                options['poolclass'] = StaticPool
            return options

        return {
            'pool_size': DB_CONFIG['pool_size'],
            'max_overflow': DB_CONFIG['max_overflow'],
            'pool_recycle': DB_CONFIG['pool_recycle'],
            'pool_pre_ping': True,
            'echo': False,
        }

    @classmethod
    def reset(cls):
        """بستن اتصال فعلی و حذف نمونه Singleton (برای آزمون‌ها و اجرای مجدد)"""
        instance = cls._instance
        if instance is not None and instance._initialized:
            instance.SessionLocal.remove()
            instance.engine.dispose()
        cls._instance = None

    def get_session(self):
        """
        ایجاد و بازگرداندن یک نشست پایگاه داده

        Returns:
            Session: یک نشست SQLAlchemy
        """
        return self.SessionLocal()

    def get_engine(self):
        return self.engine

    def create_tables(self):
        """ایجاد تمام جدول‌های تعریف شده در مدل‌ها"""
        # ثبت مدل‌ها در متادیتا
        import models  # noqa: F401

        try:
            Base.metadata.create_all(self.engine)
            logger.info("تمام جداول با موفقیت ایجاد شدند")
        except SQLAlchemyError as e:
            logger.error(f"خطا در ایجاد جداول: {str(e)}")
            raise

    def drop_tables(self):
        """حذف تمام جدول‌ها (استفاده با احتیاط)"""
        import models  # noqa: F401

        try:
            Base.metadata.drop_all(self.engine)
            logger.info("تمام جداول با موفقیت حذف شدند")
        except SQLAlchemyError as e:
            logger.error(f"خطا در حذف جداول: {str(e)}")
            raise

