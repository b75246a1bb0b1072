import asyncio

from nmt_leak_probe.models.probe_models import ProbeOutcome
from nmt_leak_probe.ui.components import SamplesDisplay, StatusItem
from nmt_leak_probe.ui.dashboard import LeakProbeDashboard
from tests.conftest import nmt_report


def test_dashboard_runs_probe_to_completion(make_probe, config, state_manager, logging_service):
    probe, process_manager, _, _ = make_probe(
        [nmt_report(120), nmt_report(256)], config_overrides={"cycles": 2}
    )
    app = LeakProbeDashboard(
        config=config,
        state_manager=state_manager,
        process_manager=process_manager,
        leak_probe=probe,
        logging_service=logging_service,
    )

    async def scenario():
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()

            assert app.query_one(".status-text", StatusItem) is not None
            assert state_manager.get_state().outcome == "failed"
            assert app.query_one(SamplesDisplay) is not None

    asyncio.run(scenario())

    assert app.error is None
    assert app.result.outcome == ProbeOutcome.FAILED
    assert app.result.second_sample_kb == 256
    assert process_manager.stopped >= 1
    assert len(process_manager.stdout_callbacks) == 1
    assert len(process_manager.stderr_callbacks) == 1
