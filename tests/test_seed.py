from dataclasses import dataclass, field

from hrms.repositories.seed import EXPLICIT_ID_TABLES, advance_id_sequences, seed_reference_data


@dataclass
class FakeDialect:
    name: str


@dataclass
class FakeBind:
    dialect: FakeDialect


@dataclass
class RecordingSession:
    dialect_name: str
    statements: list[str] = field(default_factory=list)
    flushed: bool = False

    def get_bind(self):
        return FakeBind(FakeDialect(self.dialect_name))

    def flush(self):
        self.flushed = True

    def execute(self, statement):
        self.statements.append(str(statement))


def test_postgres_sequences_follow_seeded_ids():
    session = RecordingSession("postgresql")

    advance_id_sequences(session)

    assert session.flushed
    assert len(session.statements) == len(EXPLICIT_ID_TABLES)
    for table, sql in zip(EXPLICIT_ID_TABLES, session.statements):
        assert f"pg_get_serial_sequence('{table}', 'id')" in sql
        assert f"FROM {table}" in sql


def test_other_backends_leave_sequences_alone():
    session = RecordingSession("sqlite")

    advance_id_sequences(session)

    assert session.statements == []


def test_seeding_runs_once_and_new_roles_get_fresh_ids(container, super_admin):
    assert seed_reference_data(container.store) is False

    role = container.permission_service.create_role("Ops", None, [], super_admin)
    assert role.id == 9
