import asyncio

import pytest

from tailord.errors import InvalidArgsError
from tailord.performance import create_performance_runtime


class FakeDevice:
    def __init__(self, profiles=("quiet", "power_saving", "performance")):
        self.profiles = list(profiles)
        self.applied = []

    def get_available_odm_performance_profiles(self):
        return list(self.profiles)

    def set_odm_performance_profile(self, performance_profile):
        if performance_profile not in self.profiles:
            raise InvalidArgsError()
        self.applied.append(performance_profile)


def test_default_profile_applied_when_none_given():
    device = FakeDevice()
    handle, _ = create_performance_runtime(device, None, "performance")
    assert device.applied == ["performance"]
    assert handle.active_profile == "performance"


def test_given_profile_overrides_default():
    device = FakeDevice()
    handle, _ = create_performance_runtime(device, "quiet", "performance")
    assert device.applied == ["quiet"]
    assert handle.active_profile == "quiet"


def test_invalid_initial_profile_raises():
    with pytest.raises(InvalidArgsError):
        create_performance_runtime(FakeDevice(), "turbo", "performance")


def test_available_profiles_come_from_device():
    device = FakeDevice()
    handle, _ = create_performance_runtime(device, None, "performance")
    assert handle.available_profiles() == device.profiles


@pytest.mark.asyncio
async def test_runtime_applies_profiles_until_closed():
    device = FakeDevice()
    handle, runtime = create_performance_runtime(device, None, "performance")
    task = asyncio.create_task(runtime.run())
    await handle.set_profile("quiet")
    await handle.set_profile("power_saving")
    await handle.close()
    await asyncio.wait_for(task, timeout=1)
    assert device.applied == ["performance", "quiet", "power_saving"]
    assert handle.active_profile == "power_saving"


@pytest.mark.asyncio
async def test_set_profile_after_close_raises():
    device = FakeDevice()
    handle, runtime = create_performance_runtime(device, None, "performance")
    task = asyncio.create_task(runtime.run())
    await handle.close()
    await asyncio.wait_for(task, timeout=1)
    with pytest.raises(RuntimeError):
        await handle.set_profile("quiet")


@pytest.mark.asyncio
async def test_runtime_propagates_device_rejection():
    device = FakeDevice()
    handle, runtime = create_performance_runtime(device, None, "performance")
    task = asyncio.create_task(runtime.run())
    await handle.set_profile("turbo")
    done, _ = await asyncio.wait({task}, timeout=1)
    assert task in done
    assert isinstance(task.exception(), InvalidArgsError)
    assert device.applied == ["performance"]
    assert handle.available_profiles() == ["quiet", "power_saving", "performance"]