"""
Feature: Task endpoints
  As the web client
  I want to list and hand-edit tasks over HTTP
  So that small corrections do not need a chat command

Scenario: List tasks of a board
  Given tasks on two boards
  When GET /api/tasks?boardId=... is called
  Then only that board's tasks are returned with their metadata

Scenario: Edit a task by hand
  Given an existing task
  When PATCH /api/tasks/{case_number} is called with changes
  Then the task is updated and marked as a manual edit

Scenario: Rename onto a taken case number
  Given TASK-1 and TASK-4 exist
  When TASK-1 is renamed to TASK-4
  Then the system returns 409 Conflict

Scenario: Next case number and data snapshot
  Given existing tasks
  When the next case number or the snapshot is requested
  Then they reflect the store
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine, SQLModel, select
from database import get_session
from main import app
from models.boards import Board, BoardColumn, Task, TaskPriority
from models.conversations import Conversation


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="boards")
def boards_fixture(session):
    first = Board(name="Product", title="Product")
    second = Board(name="Ops", title="Ops")
    session.add(first)
    session.add(second)
    session.commit()
    session.add(BoardColumn(board_id=first.id, title="Backlog", order=0))
    session.add(Task(
        case_number="TASK-1", title="Login", description="Login form", status="Backlog",
        priority=TaskPriority.HIGH, board_id=first.id, meta_data={"createdVia": "create-tasks"}
    ))
    session.add(Task(case_number="TASK-4", title="Deploy", status="Backlog", board_id=second.id))
    session.commit()
    session.refresh(first)
    session.refresh(second)
    return first, second


def test_list_tasks_for_board(client, boards):
    first, _ = boards

    response = client.get("/api/tasks", params={"boardId": first.id})

    assert response.status_code == 200
    data = response.json()
    assert [task["caseNumber"] for task in data] == ["TASK-1"]
    assert data[0]["priority"] == "high"
    assert data[0]["metadata"] == {"createdVia": "create-tasks"}


def test_list_all_tasks(client, boards):
    response = client.get("/api/tasks")

    assert sorted(task["caseNumber"] for task in response.json()) == ["TASK-1", "TASK-4"]


def test_next_case_number(client, boards):
    response = client.get("/api/tasks/next-case-number")

    assert response.status_code == 200
    assert response.json() == {"caseNumber": "TASK-5", "number": 5}


def test_update_task_manually(client, session, boards):
    # When TASK-1 is edited by hand
    response = client.patch("/api/tasks/TASK-1", json={
        "newCaseNumber": "TASK-10",
        "description": "Login and password reset",
        "priority": "low"
    })

    # Then the changes are stored and tagged as manual
    assert response.status_code == 200
    data = response.json()
    assert data["caseNumber"] == "TASK-10"
    assert data["description"] == "Login and password reset"
    assert data["priority"] == "low"
    assert data["metadata"]["createdVia"] == "create-tasks"
    assert data["metadata"]["updatedVia"] == "manual-edit"


def test_update_task_requires_a_change(client, boards):
    response = client.patch("/api/tasks/TASK-1", json={})

    assert response.status_code == 422


def test_update_task_rename_conflict(client, session, boards):
    # When TASK-1 is renamed onto TASK-4
    response = client.patch("/api/tasks/TASK-1", json={"newCaseNumber": "TASK-4"})

    # Then the rename is refused
    assert response.status_code == 409
    assert sorted(session.exec(select(Task.case_number)).all()) == ["TASK-1", "TASK-4"]


def test_update_missing_task(client):
    response = client.patch("/api/tasks/TASK-99", json={"priority": "high"})

    assert response.status_code == 404


def test_data_snapshot(client, session, boards):
    # Given a conversation next to the boards
    session.add(Conversation(topic="Kickoff"))
    session.commit()
    first, _ = boards

    # When the snapshot is requested for one board
    response = client.get("/api/data", params={"boardId": first.id})

    # Then it carries conversations, that board's tasks and every board
    assert response.status_code == 200
    data = response.json()
    assert [conversation["topic"] for conversation in data["conversations"]] == ["Kickoff"]
    assert [task["caseNumber"] for task in data["tasks"]] == ["TASK-1"]
    assert {board["name"] for board in data["boards"]} == {"Product", "Ops"}


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
