import json

from budgetcore.cli import main


def write_seed(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps({
        "expenses": [
            {"id": 1, "amount": 300, "date": "2024-03-01", "categoryName": "Rent"},
            {"id": 2, "amount": 120.5, "date": "2024-03-11", "categoryName": "Food"},
        ],
        "income": [{"id": 3, "amount": 2000, "date": "2024-03-01", "categoryName": "Salary"}],
        "budgets": [{"id": 1, "period": "monthly", "amount": 500}],
    }), encoding="utf-8")
    return str(path)


def test_report_text(tmp_path, capsys):
    code = main(["report", "--data", write_seed(tmp_path), "--period", "month", "--as-of", "2024-03-15"])
    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("March 2024 - Monthly Expense Report")
    assert "Total Expenses: $420.50" in out
    assert "Monthly: warning (84.1% used" in out


def test_report_json_and_csv(tmp_path, capsys):
    csv_path = tmp_path / "trend.csv"
    code = main([
        "report", "--data", write_seed(tmp_path), "--as-of", "2024-03-15",
        "--json", "--csv", str(csv_path), "--months", "1",
    ])
    data = json.loads(capsys.readouterr().out)
    assert code == 0
    assert data["subject"] == "March 2024 - Monthly Expense Report"
    assert data["totals"]["net"] == 1579.5
    lines = csv_path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("period,start,end,total,count")
    assert [line.split(",")[0] for line in lines[1:]] == ["2024-02", "2024-03"]


def test_bad_period_exits_with_2(tmp_path, capsys):
    code = main(["report", "--data", write_seed(tmp_path), "--period", "hourly"])
    assert code == 2
    assert "Unknown period kind" in capsys.readouterr().err


def test_missing_file_exits_with_1(tmp_path, capsys):
    code = main(["report", "--data", str(tmp_path / "nope.json")])
    assert code == 1
    assert "error:" in capsys.readouterr().err


def test_utc_dates_from_api_exports(tmp_path, capsys):
    path = tmp_path / "export.json"
    path.write_text(json.dumps({
        "expenses": [
            {"id": 1, "amount": 45, "date": "2024-03-02T10:00:00.000Z", "category": {"name": "Food"}},
        ],
        "budgets": [{"id": 1, "period": "monthly", "amount": 500}],
    }), encoding="utf-8")
    code = main(["report", "--data", str(path), "--as-of", "2024-03-10"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Total Expenses: $45.00" in out
    assert "Food: $45.00 (100.0%)" in out


def test_data_that_is_not_an_object_exits_with_1(tmp_path, capsys):
    path = tmp_path / "list.json"
    path.write_text(json.dumps([{"id": 1, "amount": 5, "date": "2024-03-01"}]), encoding="utf-8")
    code = main(["report", "--data", str(path)])
    assert code == 1
    assert "Expected a JSON object" in capsys.readouterr().err
