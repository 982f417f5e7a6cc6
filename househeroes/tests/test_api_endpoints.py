def test_healthcheck(client):
    # Act
    response = client.get("/health")

    # Assert
    assert response.status_code == 200
    assert response.json() == {"status": "Healthy"}


def test_list_tasks_empty(db_session, client):
    response = client.get("/api/tasks")

    assert response.status_code == 200
    assert response.json() == []


def test_list_tasks_with_related_records(seeded_session, client):
    # Act
    response = client.get("/api/tasks")

    # Assert
    assert response.status_code == 200
    tasks = response.json()
    assert len(tasks) == 11

    lawn = next(t for t in tasks if t["title"] == "Mow the lawn")
    assert lawn["isCompleted"] is False
    assert lawn["family"]["name"] == "The Johnson Family"
    assert lawn["createdBy"]["firstName"] == "Marc"
    assert lawn["createdBy"]["role"] == "Guardian"
    assert sorted(a["firstName"] for a in lawn["assignees"]) == ["Alex", "Ethan"]
    assert "dueDate" in lawn and "createdAt" in lawn
