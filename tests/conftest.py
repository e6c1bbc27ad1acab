"""
Pytest Configuration and Fixtures

Shared fixtures for the circuit advisor tests.
"""
import pytest
from unittest.mock import AsyncMock

from crrt_advisor.core import (
    AnticoagulationMode,
    CircuitParameters,
    CircuitSession,
    DilutionMode,
)
from crrt_advisor.core.llm import GeminiClient, GeminiConfig, GeminiResponse
from crrt_advisor.services import AdvisoryExplainer


@pytest.fixture
def default_params() -> CircuitParameters:
    """Parameters as the bedside form opens."""
    return CircuitParameters()


@pytest.fixture
def quiet_params() -> CircuitParameters:
    """Heparin circuit with every reading in range (no advisory fires)."""
    return CircuitParameters(aptt=70)


@pytest.fixture
def post_dilution_params() -> CircuitParameters:
    """Qb 200, Qrep 1500, NetUF 100, post-dilution: FF 19.0%."""
    return CircuitParameters(dilution=DilutionMode.POST, qb=200, q_rep=1500, net_uf=100)


@pytest.fixture
def citrate_params() -> CircuitParameters:
    return CircuitParameters(anticoagulation=AnticoagulationMode.CITRATE_CA)


@pytest.fixture
def session() -> CircuitSession:
    return CircuitSession()


@pytest.fixture
def offline_client() -> GeminiClient:
    """Client without an API key (explanations unavailable)."""
    return GeminiClient(GeminiConfig(api_key=None))


@pytest.fixture
def fake_client() -> GeminiClient:
    """Client whose async generate returns a fixed answer."""
    client = GeminiClient(GeminiConfig(api_key=None))
    client.generate_async = AsyncMock(
        return_value=GeminiResponse(text="**Core Causes**: stasis.", model="test")
    )
    return client


@pytest.fixture
def explainer(fake_client) -> AdvisoryExplainer:
    return AdvisoryExplainer(client=fake_client, language="English")
