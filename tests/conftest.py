"""Shared fixtures: in-memory database, API client and sample EA logs."""

import os

# Must be set before tickphysics.config is imported
os.environ["TP_DATABASE_URL"] = "sqlite://"
os.environ["TP_AUTO_CREATE_TABLES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

import tickphysics.models  # noqa: F401
from tickphysics.database import engine
from tickphysics.main import app


TRADES_CSV = """\
Ticket,OpenTime,CloseTime,Type,OpenPrice,ClosePrice,SL,TP,Profit,Pips,ExitReason,EntryQuality,EntryConfluence,MFE_Pips,MAE_Pips,RunUp_Pips,RunDown_Pips
1001,2025-01-06 09:00:00,2025-01-06 09:45:00,buy,15000.0,15100.0,14950.0,15100.0,10.0,100.0,tp,80,70,110,5,40,0
1002,2025-01-06 10:00:00,2025-01-06 10:30:00,sell,15100.0,15150.0,15150.0,15000.0,-5.0,-50.0,sl,55,40,10,50,0,-60
1003,2025-01-06 11:00:00,2025-01-06 12:00:00,buy,15150.0,15350.0,15050.0,15350.0,20.0,200.0,tp,85,75,210,10,20,0
1004,2025-01-07 09:15:00,2025-01-07 10:15:00,buy,15300.0,15100.0,15100.0,15500.0,-20.0,-200.0,sl,50,35,30,200,0,-20
1005,2025-01-07 13:00:00,2025-01-07 13:20:00,sell,15120.0,15070.0,15200.0,14900.0,5.0,50.0,reversal,70,60,80,15,100,0
"""

SIGNALS_CSV = """\
Timestamp,signalType,SkipReason,EntryQuality
2025-01-06 09:00:00,buy,,80
2025-01-06 09:30:00,skip,LowQuality,30
2025-01-06 10:00:00,sell,,55
2025-01-06 10:30:00,skip,LowQuality,25
2025-01-06 11:00:00,buy,,85
2025-01-06 11:30:00,skip,Spread,60
2025-01-07 09:15:00,buy,,50
2025-01-07 13:00:00,sell,,70
"""

MT5_DEALS_CSV = """\
Time,Deal,Symbol,Type,Direction,Volume,Price,Order,Commission,Swap,Profit,Balance,Comment
2025.01.06 00:00,1,,balance,,,,,0.00,0.00,1 000.00,1 000.00,
2025.01.06 09:00,2,NAS100,buy,in,0.1,15000.0,2,0.00,0.00,0.00,1 000.00,
2025.01.06 09:45,3,NAS100,sell,out,0.1,15100.0,3,0.00,0.00,10.00,1 010.00,tp 15100.0
2025.01.06 10:00,4,NAS100,sell,in,0.1,15100.0,4,0.00,0.00,0.00,1 010.00,
2025.01.06 10:30,5,NAS100,buy,out,0.1,15150.0,5,0.00,0.00,-5.00,1 005.00,sl 15150.0
2025.01.06 11:00,6,NAS100,buy,in,0.1,15150.0,6,0.00,0.00,0.00,1 005.00,
2025.01.06 12:00,7,NAS100,sell,out,0.1,15350.0,7,0.00,0.00,20.00,1 025.00,tp 15350.0
2025.01.07 09:15,8,NAS100,buy,in,0.1,15300.0,8,0.00,0.00,0.00,1 025.00,
2025.01.07 10:15,9,NAS100,sell,out,0.1,15100.0,9,0.00,0.00,-20.00,1 005.00,sl 15100.0
2025.01.07 13:00,10,NAS100,sell,in,0.1,15120.0,10,0.00,0.00,0.00,1 005.00,
2025.01.07 13:20,11,NAS100,buy,out,0.1,15070.0,11,0.00,0.00,5.00,1 010.00,
"""


@pytest.fixture(autouse=True)
def db():
    """Fresh schema for every test."""
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def trades_csv(tmp_path):
    path = tmp_path / "TP_Integrated_Trades_NAS100_M15_v1_7.csv"
    path.write_text(TRADES_CSV)
    return path


@pytest.fixture
def signals_csv(tmp_path):
    path = tmp_path / "TP_Integrated_Signals_NAS100_M15_v1_7.csv"
    path.write_text(SIGNALS_CSV)
    return path


@pytest.fixture
def mt5_deals_csv(tmp_path):
    path = tmp_path / "ReportTester-NAS100.csv"
    path.write_text(MT5_DEALS_CSV)
    return path
