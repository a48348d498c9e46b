doctor_data = {
    "name": "Dr. Smith",
    "email": "smith.directory@example.com",
    "specialty": "Cardiology",
    "phone": "555-0200",
    "experience": "12 years",
}


def create_doctor(client, headers, **overrides):
    response = client.post("/api/doctors", json={**doctor_data, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestDoctorDirectory:

    def test_directory_is_public(self, client, doctor_smith):
        created = create_doctor(client, doctor_smith["headers"])

        response = client.get("/api/doctors")
        assert response.status_code == 200
        assert [d["name"] for d in response.json()] == ["Dr. Smith"]

        response = client.get(f"/api/doctors/{created['id']}")
        assert response.status_code == 200
        assert response.json()["status"] == "active"

    def test_create_requires_auth(self, client):
        response = client.post("/api/doctors", json=doctor_data)
        assert response.status_code == 401

    def test_patient_may_create(self, client, patient):
        assert create_doctor(client, patient["headers"])["specialty"] == "Cardiology"

    def test_missing_doctor(self, client):
        response = client.get("/api/doctors/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Doctor not found"

    def test_by_specialty(self, client, admin):
        create_doctor(client, admin["headers"])
        create_doctor(
            client, admin["headers"], name="Dr. Jones", email="jones.d@example.com",
            specialty="Pediatric Cardiology"
        )
        create_doctor(
            client, admin["headers"], name="Dr. Brown", email="brown.d@example.com",
            specialty="Dermatology"
        )

        response = client.get("/api/doctors/specialty/cardio")
        assert response.status_code == 200
        assert [d["name"] for d in response.json()] == ["Dr. Jones", "Dr. Smith"]

    def test_update_admin_only(self, client, doctor_smith, admin):
        created = create_doctor(client, doctor_smith["headers"])
        url = f"/api/doctors/{created['id']}"

        response = client.put(url, json={"specialty": "Surgery"}, headers=doctor_smith["headers"])
        assert response.status_code == 403

        response = client.put(url, json={"specialty": "Surgery"}, headers=admin["headers"])
        assert response.status_code == 200
        assert response.json()["specialty"] == "Surgery"

    def test_deactivate(self, client, patient, admin):
        created = create_doctor(client, admin["headers"])
        url = f"/api/doctors/{created['id']}"

        assert client.delete(url, headers=patient["headers"]).status_code == 403

        response = client.delete(url, headers=admin["headers"])
        assert response.status_code == 200
        assert response.json()["doctor"]["status"] == "inactive"

        # Deactivated doctors drop out of the directory listing but keep their record
        assert client.get("/api/doctors").json() == []
        assert client.get(url).status_code == 200
