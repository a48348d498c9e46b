def create_record(client, headers, patient_id, **overrides):
    response = client.post("/api/lab-records", json={
        "patient_id": patient_id,
        "test_name": "Complete Blood Count",
        "date": "2026-02-14",
        "category": "Hematology",
        **overrides,
    }, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestLabRecords:

    def test_doctor_creates_record(self, client, patient, doctor_smith):
        record = create_record(client, doctor_smith["headers"], patient["id"])
        assert record["doctor"] == "Dr. Smith"
        assert record["status"] == "pending"

    def test_patient_cannot_create(self, client, patient):
        response = client.post("/api/lab-records", json={
            "patient_id": patient["id"],
            "test_name": "Lipid Panel",
            "date": "2026-02-14",
            "category": "Chemistry",
        }, headers=patient["headers"])
        assert response.status_code == 403

    def test_lists_are_scoped(self, client, patient, other_patient, doctor_smith, doctor_jones, admin):
        create_record(client, doctor_smith["headers"], patient["id"])
        create_record(client, doctor_jones["headers"], other_patient["id"])

        response = client.get("/api/lab-records", headers=patient["headers"])
        assert [r["patient_id"] for r in response.json()] == [patient["id"]]

        response = client.get("/api/lab-records", headers=doctor_jones["headers"])
        assert [r["doctor"] for r in response.json()] == ["Dr. Jones"]

        response = client.get("/api/lab-records", headers=admin["headers"])
        assert len(response.json()) == 2

    def test_read_one(self, client, patient, other_patient, doctor_smith):
        record = create_record(client, doctor_smith["headers"], patient["id"])
        url = f"/api/lab-records/{record['id']}"

        assert client.get(url, headers=patient["headers"]).status_code == 200
        assert client.get(url, headers=other_patient["headers"]).status_code == 403

    def test_update(self, client, patient, doctor_smith):
        record = create_record(client, doctor_smith["headers"], patient["id"])
        url = f"/api/lab-records/{record['id']}"

        response = client.put(url, json={"result": "Normal"}, headers=patient["headers"])
        assert response.status_code == 403

        response = client.put(
            url, json={"result": "Normal", "status": "completed"}, headers=doctor_smith["headers"]
        )
        assert response.status_code == 200
        assert response.json()["result"] == "Normal"
        assert response.json()["status"] == "completed"

    def test_delete(self, client, patient, other_patient, doctor_smith):
        record = create_record(client, doctor_smith["headers"], patient["id"])
        url = f"/api/lab-records/{record['id']}"

        assert client.delete(url, headers=other_patient["headers"]).status_code == 403
        assert client.delete(url, headers=patient["headers"]).status_code == 200
        assert client.get(url, headers=doctor_smith["headers"]).status_code == 404

    def test_missing_patient_account(self, client, doctor_smith):
        response = client.post("/api/lab-records", json={
            "patient_id": 9999,
            "test_name": "Lipid Panel",
            "date": "2026-02-14",
            "category": "Chemistry",
        }, headers=doctor_smith["headers"])
        assert response.status_code == 404
        assert response.json()["detail"] == "Account not found"

        response = client.get("/api/lab-records", headers=doctor_smith["headers"])
        assert response.json() == []
