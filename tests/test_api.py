from datetime import timedelta

from components.core.security import create_access_token


async def create_book(client, total_copies=1, isbn="9780131103627", title="The C Programming Language"):
    response = await client.post("/book", json={
        "IsbnNumber": isbn,
        "Title": title,
        "Author": "Kernighan, Ritchie",
        "TotalCopies": total_copies,
    })
    assert response.status_code == 200, response.text
    return response.json()


async def create_student(client, email="asha@example.edu"):
    response = await client.post("/student", json={
        "FirstName": "Asha",
        "LastName": "Verma",
        "Email": email,
    })
    assert response.status_code == 200, response.text
    return response.json()


async def issue(client, book, student, days=7, **extra):
    return await client.post("/book-issue", json={
        "BookId": book["BookId"],
        "StudentId": student["StudentId"],
        "Days": days,
        **extra,
    })


async def test_health_check(client):
    response = await client.get("/health_check/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_issue_book(client, clock):
    book = await create_book(client, total_copies=1)
    student = await create_student(client)

    response = await issue(client, book, student, CreatedBy="front-desk")

    assert response.status_code == 200
    body = response.json()
    assert body["Message"] == "Book issued successfully"
    assert body["Loan"]["Status"] == "issued"
    assert body["Loan"]["CreatedBy"] == "front-desk"
    assert body["Loan"]["DueDate"] == (clock.now + timedelta(days=7)).isoformat()
    assert body["Loan"]["StudentName"] == "Asha Verma"

    book = (await client.get(f"/book/{book['BookId']}")).json()
    assert book["AvailableCopies"] == 0

    other = await create_student(client, email="ravi@example.edu")
    response = await issue(client, book, other)
    assert response.status_code == 400
    assert response.json()["error"] == "Unavailable"


async def test_issue_with_missing_fields_is_validation_error(client):
    response = await client.post("/book-issue", json={"StudentId": 1})

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


async def test_issue_with_unknown_field_is_rejected(client):
    book = await create_book(client)
    student = await create_student(client)

    response = await issue(client, book, student, Librarian="me")

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


async def test_token_identity_is_the_audit_actor(client):
    book = await create_book(client)
    student = await create_student(client)
    token = create_access_token({"sub": "42", "name": "Priya"})

    response = await client.post(
        "/book-issue",
        json={"BookId": book["BookId"], "StudentId": student["StudentId"], "Days": 7,
              "CreatedBy": "someone-else"},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.json()["Loan"]["CreatedBy"] == "Priya"


async def test_renew_and_return_late_then_settle(client, clock):
    book = await create_book(client)
    student = await create_student(client)
    loan = (await issue(client, book, student)).json()["Loan"]
    issue_id = loan["IssueId"]

    response = await client.put(f"/book-issue?id={issue_id}", json={"renewDays": 3})
    assert response.status_code == 200
    renewed = response.json()
    assert renewed["Message"] == "Book renewed successfully"
    assert renewed["NewDueDate"] == (clock.now + timedelta(days=10)).isoformat()
    assert renewed["Loan"]["IsRenewed"] is True

    clock.advance(days=12)
    response = await client.get("/book-issue", params={"status": "overdue"})
    assert [l["IssueId"] for l in response.json()] == [issue_id]

    response = await client.put(f"/book-issue?id={issue_id}", json={"status": "returned"})
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"

    response = await client.put(
        f"/book-issue?id={issue_id}",
        json={"status": "returned", "fineAmount": 50, "ModifiedBy": "front-desk"},
    )
    assert response.status_code == 200
    returned = response.json()
    assert returned["Loan"]["Status"] == "returned"
    assert returned["Loan"]["LateDays"] == 2
    assert returned["Loan"]["ModifiedBy"] == "front-desk"
    assert returned["PenaltyId"] is not None

    penalty = (await client.get(f"/penalty/by-issue/{issue_id}")).json()
    assert penalty["Amount"] == 50
    assert penalty["Remaining"] == 50
    assert penalty["PenaltyStatus"] == "unpaid"

    payment = {
        "IssueId": issue_id,
        "StudentId": student["StudentId"],
        "AmountPaid": 50,
        "PaymentMode": "Bank Transfer",
        "TransactionId": "TXN001",
        "ReceiveBy": "cashier",
    }
    response = await client.post("/library-payment", json=payment)
    assert response.status_code == 200, response.text
    assert response.json()["PenaltyStatus"] == "paid"
    assert response.json()["Payment"]["PaymentId"] is not None

    response = await client.post("/penalty/payment", json={**payment, "AmountPaid": 1})
    assert response.status_code == 400

    payments = (await client.get("/library-payment", params={"issueId": issue_id})).json()
    assert [p["TransactionId"] for p in payments] == ["TXN001"]

    penalties = (await client.get(f"/student/{student['StudentId']}/penalties")).json()
    assert penalties[0]["PenaltyStatus"] == "paid"


async def test_reused_transaction_id_is_duplicate(client, clock):
    student = await create_student(client)
    issue_ids = []
    for n in range(2):
        book = await create_book(client, isbn=f"97800000000{n}", title=f"Book {n}")
        issue_ids.append((await issue(client, book, student)).json()["Loan"]["IssueId"])
    clock.advance(days=9)
    for issue_id in issue_ids:
        response = await client.put(
            f"/book-issue?id={issue_id}", json={"status": "returned", "fineAmount": 20}
        )
        assert response.status_code == 200

    payment = {
        "StudentId": student["StudentId"],
        "AmountPaid": 5,
        "PaymentMode": "Cheque",
        "TransactionId": "CHQ-1001",
    }
    first = await client.post("/library-payment", json={**payment, "IssueId": issue_ids[0]})
    second = await client.post("/library-payment", json={**payment, "IssueId": issue_ids[1]})

    assert first.status_code == 200
    assert first.json()["Payment"]["ReceiveBy"] == "system"
    assert second.status_code == 400
    assert second.json()["error"] == "DuplicateTransaction"


async def test_invalid_action_is_rejected(client):
    book = await create_book(client)
    student = await create_student(client)
    issue_id = (await issue(client, book, student)).json()["Loan"]["IssueId"]

    response = await client.put(f"/book-issue?id={issue_id}", json={})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid action"


async def test_edit_and_delete_loan(client):
    first = await create_book(client, isbn="9780000000001", title="First")
    second = await create_book(client, isbn="9780000000002", title="Second")
    student = await create_student(client)
    issue_id = (await issue(client, first, student)).json()["Loan"]["IssueId"]

    response = await client.patch(
        f"/book-issue?id={issue_id}",
        json={"BookId": second["BookId"], "StudentId": student["StudentId"], "Days": 5},
    )
    assert response.status_code == 200
    assert response.json()["Loan"]["BookTitle"] == "Second"
    assert (await client.get(f"/book/{first['BookId']}")).json()["AvailableCopies"] == 1

    response = await client.delete(f"/book-issue?id={issue_id}")
    assert response.status_code == 200
    assert response.json()["Message"] == "Book issue deleted successfully"
    assert (await client.get(f"/book/{second['BookId']}")).json()["AvailableCopies"] == 1

    response = await client.delete(f"/book-issue?id={issue_id}")
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


async def test_unknown_ids_are_not_found(client):
    assert (await client.get("/book-issue/999")).status_code == 404
    assert (await client.get("/book/999")).status_code == 404
    assert (await client.get("/student/999/loans")).status_code == 404
    assert (await client.get("/penalty/by-issue/999")).status_code == 404


async def test_stock_adjustments(client):
    book = await create_book(client, total_copies=1)

    response = await client.post(
        "/book-stock-history", json={"BookId": book["BookId"], "CopiesAdded": -2}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InsufficientStock"

    response = await client.post(
        "/book-stock-history",
        json={"BookId": book["BookId"], "CopiesAdded": 3, "Remarks": "Delivery"},
    )
    assert response.status_code == 200
    body = response.json()
    assert (body["TotalCopies"], body["AvailableCopies"]) == (4, 4)
    history_id = body["History"]["BookStockHistoryId"]

    response = await client.put(
        f"/book-stock-history?id={history_id}", json={"Remarks": "Publisher delivery"}
    )
    assert response.status_code == 200
    assert response.json()["Remarks"] == "Publisher delivery"
    assert response.json()["CopiesAdded"] == 3

    history = (await client.get("/book-stock-history", params={"bookId": book["BookId"]})).json()
    assert len(history) == 1


async def test_reports(client):
    book = await create_book(client, total_copies=2)
    student = await create_student(client)
    await issue(client, book, student)

    dashboard = (await client.get("/reports/dashboard")).json()
    assert dashboard["OpenLoans"] == 1
    assert dashboard["AvailableCopies"] == 1

    monthly = (await client.get("/reports/monthly-issues")).json()
    assert monthly["Year"] == 2024
    assert monthly["TotalIssued"] == 1


async def test_error_body_is_documented(client):
    schema = (await client.get("/openapi.json")).json()

    assert "ErrorResponse" in schema["components"]["schemas"]
    responses = schema["paths"]["/book-issue"]["post"]["responses"]
    assert responses["404"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")

    body = (await client.get("/book-issue/999")).json()
    assert body == {"message": "Issue not found: 999", "error": "NotFound"}
