#!/usr/bin/env python
"""Seed the database with sample villages, nodes, devices and persons."""
from sqlalchemy.orm import Session

from gatekeeper.db.base import SessionLocal, get_engine
from gatekeeper.models import Device, Node, Person, Village
from gatekeeper.services import PersonDirectory, TopologyRegistry


VILLAGES = [
    ("village-1", "Poonch"),
    ("village-2", "Rajouri"),
    ("village-3", "Doda"),
    ("village-4", "Udhampur"),
    ("village-5", "Baramulla"),
]

NODES = [
    ("node-1", "village-1", "Main Gate", "gate", "Primary entrance to Poonch"),
    ("node-2", "village-1", "Back Gate", "gate", "Secondary entrance at the rear"),
    ("node-3", "village-1", "Checkpoint 1", "checkpoint", "Internal checkpoint near residential area"),
    ("node-4", "village-2", "Main Entrance", "gate", "Main entrance to Rajouri"),
    ("node-5", "village-2", "Side Gate", "gate", "Side entrance for vehicles"),
    ("node-6", "village-3", "Main Gate", "gate", "Primary entrance to Doda"),
    ("node-7", "village-4", "Main Gate", "gate", "Main entrance to Udhampur"),
    ("node-8", "village-5", "Main Gate", "gate", "Main entrance to Baramulla"),
]

DEVICES = [
    # (id, node_id, name, type, is_active, operator)
    ("device-1", "node-1", "Main Gate Device", "gate", True, "Security Guard 1"),
    ("device-2", "node-2", "Back Gate Device", "gate", True, "Security Guard 2"),
    ("device-3", "node-1", "Mobile Device - Guard 1", "mobile", True, "John Smith"),
    ("device-4", "node-2", "Inactive Device", "mobile", False, "Inactive Guard"),
    ("device-5", "node-3", "Admin Tablet", "tablet", True, "Admin User"),
    ("device-6", "node-4", "Main Entrance Device", "gate", True, "Security Guard 3"),
    ("device-7", "node-6", "Doda Main Gate", "gate", True, "Security Guard 5"),
    ("device-8", "node-8", "Baramulla Main Gate", "gate", True, "Security Guard 9"),
    ("device-auth", None, "Enrollment Console", "admin", True, "Registrar"),
]

PERSONS = [
    ("person-1", "Ahmed", "Khan", "+919876543210", "MALE", 35, "village-1", "1234-5678-9012",
     "House No. 45, Main Street, Poonch"),
    ("person-2", "Fatima", "Sheikh", "+919876543211", "FEMALE", 28, "village-2", "1234-5678-9013",
     "House No. 12, Market Road, Rajouri"),
    ("person-3", "Mohammad", "Ali", "+919876543212", "MALE", 42, "village-3", "1234-5678-9014",
     "House No. 78, Residential Area, Doda"),
    ("person-4", "Ayesha", "Begum", "+919876543213", "FEMALE", 31, "village-4", "1234-5678-9015",
     "House No. 23, Colony Street, Udhampur"),
    ("person-5", "Hassan", "Raza", "+919876543214", "MALE", 39, "village-5", "1234-5678-9016",
     "House No. 56, Main Bazaar, Baramulla"),
    ("person-6", "Zainab", "Hussain", "+919876543215", "FEMALE", 26, "village-1", "1234-5678-9017",
     "House No. 34, New Colony, Poonch"),
]


def seed_topology(db: Session):
    """Create villages, nodes and devices."""
    registry = TopologyRegistry(db)

    for village_id, name in VILLAGES:
        if db.get(Village, village_id) is None:
            registry.create_village({"id": village_id, "name": name})
            print(f"  → Created village: {name}")

    for node_id, village_id, name, node_type, location in NODES:
        if db.get(Node, node_id) is None:
            registry.create_node({
                "id": node_id,
                "village_id": village_id,
                "node_name": name,
                "node_type": node_type,
                "location_description": location,
            })
            print(f"  → Created node: {name} ({village_id})")

    for device_id, node_id, name, device_type, is_active, operator in DEVICES:
        if db.get(Device, device_id) is None:
            registry.register_device({
                "id": device_id,
                "node_id": node_id,
                "device_name": name,
                "device_type": device_type,
                "is_active": is_active,
                "operator_name": operator,
            })
            print(f"  → Created device: {name}")

    print("✅ Seeded topology")


def seed_persons(db: Session):
    """Enroll sample residents through the directory so each gets an audit record."""
    directory = PersonDirectory(db)

    for person_id, first, last, phone, gender, age, village_id, aadhar, address in PERSONS:
        if db.get(Person, person_id) is not None:
            continue
        directory.enroll({
            "id": person_id,
            "first_name": first,
            "last_name": last,
            "phone": phone,
            "gender": gender,
            "age": age,
            "religion": "ISLAM",
            "village_id": village_id,
            "id_proof_type": "AADHAR",
            "id_proof_number": aadhar,
            "category": "resident",
            "address": address,
        }, changed_by="seed")
        print(f"  → Enrolled person: {first} {last}")

    print("✅ Seeded persons")


def main():
    db = SessionLocal(bind=get_engine())
    try:
        seed_topology(db)
        seed_persons(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
