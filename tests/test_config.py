import unittest
import os
import sys
from datetime import datetime

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from database.session import configure_engine, drop_db, init_db
from services.clock import FixedClock
from services.schemas import ActivityLevel, Gender, Goal, Profile


class TestConfig:
    """Test configuration"""
    DATABASE_URL = 'sqlite://'
    TIMEZONE = 'UTC'
    NOW = datetime(2025, 6, 15, 12, 0)


def make_profile(**overrides) -> Profile:
    """Complete profile: 70 kg, 175 cm, 30 years, male, sedentary, maintain."""
    values = dict(
        user_id=1001,
        goal=Goal.MAINTAIN_WEIGHT,
        gender=Gender.MALE,
        birth_year=TestConfig.NOW.year - 30,
        activity_level=ActivityLevel.SEDENTARY,
        height_cm=175,
        weight_kg=70.0,
        info_id=1,
    )
    values.update(overrides)
    return Profile(**values)


class BaseTestCase(unittest.TestCase):
    """Base test case with common setup"""

    def setUp(self):
        """Set up test fixtures"""
        self.clock = FixedClock(TestConfig.NOW, tz_name=TestConfig.TIMEZONE)

    def tearDown(self):
        """Clean up after tests"""
        pass


class DatabaseTestCase(BaseTestCase):
    """Test case with a fresh in-memory database"""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        configure_engine(TestConfig.DATABASE_URL)

    def setUp(self):
        super().setUp()
        drop_db()
        init_db()

    def tearDown(self):
        drop_db()
        super().tearDown()
