"""
Tests for the action catalog and registry.
"""
import pytest

from utility_ai.selection import (
    ActionCatalog,
    ActionRegistry,
    EventBus,
    SelectorEvent,
    UtilityAction,
)
from utility_ai.types import Agent


class Idle(UtilityAction):
    def score(self, agent, body):
        return 1.0


class Patrol(UtilityAction):
    def spawn(self, agent):
        agent.blackboard.setdefault("spawned", []).append(self.name)

    def score(self, agent, body):
        return 5.0


class Guard(UtilityAction):
    def __init__(self, post):
        super().__init__()
        self.post = post

    def score(self, agent, body):
        return 1.0


@pytest.fixture
def catalog():
    catalog = ActionCatalog()
    catalog.register(Idle)
    catalog.register(Patrol)
    return catalog


@pytest.fixture
def agent():
    return Agent("guard_01", body="pawn")


class TestActionCatalog:
    """Test name resolution."""

    def test_resolve_name(self, catalog):
        """Registered names resolve to their types."""
        assert catalog.resolve("Patrol") is Patrol

    def test_resolve_type_passthrough(self, catalog):
        """Action types resolve to themselves, registered or not."""
        assert catalog.resolve(Guard) is Guard

    def test_resolve_missing(self, catalog):
        """None, unknown names and non-action types resolve to None."""
        assert catalog.resolve(None) is None
        assert catalog.resolve("Dance") is None
        assert catalog.resolve(dict) is None

    def test_register_rejects_non_actions(self, catalog):
        """Only UtilityAction subclasses can be registered."""
        with pytest.raises(TypeError):
            catalog.register(dict)

    def test_register_as_decorator(self):
        """register() returns the type unchanged."""
        catalog = ActionCatalog()

        @catalog.register
        class Sleep(UtilityAction):
            def score(self, agent, body):
                return 0.5

        assert catalog.resolve("Sleep") is Sleep
        assert "Sleep" in catalog

    def test_register_custom_name(self, catalog):
        """An explicit name overrides the class name."""
        catalog.register(Idle, name="rest")

        assert catalog.resolve("rest") is Idle
        assert catalog.names() == ["Idle", "Patrol", "rest"]
        assert len(catalog) == 3


class TestActionRegistry:
    """Test instance uniqueness and spawning."""

    def test_spawn_once_per_type(self, catalog, agent):
        """A second spawn of the same type returns None."""
        registry = ActionRegistry(agent, catalog=catalog)

        first = registry.spawn_instance(Idle)
        second = registry.spawn_instance("Idle")

        assert isinstance(first, Idle)
        assert second is None
        assert len(registry) == 1
        assert registry.instance_by_type(Idle) is first

    def test_can_spawn(self, catalog, agent):
        """can_spawn_instance() is False for spawned, unknown and None."""
        registry = ActionRegistry(agent, catalog=catalog)

        assert registry.can_spawn_instance(Idle) is True
        registry.spawn_instance(Idle)

        assert registry.can_spawn_instance(Idle) is False
        assert registry.can_spawn_instance("Dance") is False
        assert registry.can_spawn_instance(None) is False

    def test_spawn_without_agent(self, catalog):
        """Nothing spawns while no agent is bound."""
        registry = ActionRegistry(None, catalog=catalog)

        assert registry.spawn_instance(Idle) is None
        assert len(registry) == 0

    def test_spawn_calls_hook_and_emits(self, catalog, agent):
        """spawn() runs once with the agent and action_spawned fires."""
        events = EventBus()
        spawned = []
        events.subscribe(SelectorEvent.ACTION_SPAWNED, spawned.append)
        registry = ActionRegistry(agent, events, catalog)

        action = registry.spawn_instance(Patrol)

        assert agent.blackboard["spawned"] == ["Patrol"]
        assert spawned == [action]

    def test_abstract_types_not_spawned(self, catalog, agent):
        """Abstract action types return None instead of raising."""

        class Unscored(UtilityAction):
            pass

        registry = ActionRegistry(agent, catalog=catalog)

        assert registry.spawn_instance(UtilityAction) is None
        assert registry.spawn_instance(Unscored) is None
        assert registry.can_spawn_instance(Unscored) is False
        assert len(registry) == 0

    def test_insertion_order(self, catalog, agent):
        """Enumeration follows spawn order."""
        registry = ActionRegistry(agent, catalog=catalog)
        registry.spawn_instance(Patrol)
        registry.spawn_instance(Idle)

        assert [a.name for a in registry] == ["Patrol", "Idle"]

    def test_instances_is_a_copy(self, catalog, agent):
        """Mutating the returned list does not affect the registry."""
        registry = ActionRegistry(agent, catalog=catalog)
        registry.spawn_instance(Idle)

        registry.instances().clear()

        assert len(registry.instances()) == 1

    def test_custom_factory(self, catalog, agent):
        """The factory builds instances needing constructor arguments."""
        registry = ActionRegistry(
            agent,
            catalog=catalog,
            factory=lambda action_type, owner: action_type(post=owner.agent_id),
        )

        guard = registry.spawn_instance(Guard)

        assert guard.post == "guard_01"

    def test_contains_is_identity(self, catalog, agent):
        """Only the registered instance is contained."""
        registry = ActionRegistry(agent, catalog=catalog)
        action = registry.spawn_instance(Idle)

        assert action in registry
        assert Idle() not in registry

    def test_killed_action_stays_registered(self, catalog, agent):
        """kill() does not remove the instance."""
        registry = ActionRegistry(agent, catalog=catalog)
        action = registry.spawn_instance(Idle)

        action.kill()

        assert registry.instance_by_type(Idle) is action
        assert registry.can_spawn_instance(Idle) is False
