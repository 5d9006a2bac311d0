from flask import Flask, render_template, request, send_file, url_for
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from datetime import datetime
from config import Config, setup_logging
from errors import SeatingError
from hall_plan import parse_hall_plan
from pdf_service import generate_seating_pdf
from qr_service import make_hall_qr_svg
from roster_service import (
    find_seat,
    import_roster,
    load_hall_plan,
    parse_roster_csv,
    run_allocation,
    save_assignments,
    save_hall_plan,
)

app = Flask(__name__)
app.config.from_object(Config)

logger = setup_logging(app.config["LOG_DIR"], app.config["LOG_LEVEL"])

client = MongoClient(app.config["MONGO_URI"])
db = client[app.config["MONGO_DB"]]

YEARS = [("1", "I"), ("2", "II"), ("3", "III"), ("4", "IV")]


@app.route('/')
def index():
    return render_template('index.html')


@app.route('/search', methods=['POST'])
def search():
    registration_number = request.form.get('registration_number', '').strip().upper()
    hall = request.form.get('hall', '').strip() or None
    if not registration_number:
        return render_template('index.html', error="Please enter a registration number.")

    try:
        seat = find_seat(db, registration_number, hall)
    except PyMongoError as e:
        logger.error("Seat lookup failed: %s", e)
        return render_template('index.html', error="Seat lookup is unavailable right now.")

    if seat["found"]:
        return render_template('result.html', seat=seat)
    return render_template('index.html', error=f"Registration number '{registration_number}' not found.")


@app.route('/qr-seat', methods=['GET', 'POST'])
def qr_seat():
    hall = request.args.get('hall', '').strip()
    seat = None
    error = None
    if request.method == 'POST':
        registration_number = request.form.get('registration_number', '').strip().upper()
        try:
            seat = find_seat(db, registration_number, hall or None)
        except PyMongoError as e:
            logger.error("QR seat lookup failed: %s", e)
            error = "Seat lookup is unavailable right now."
    return render_template('qr_seat.html', hall=hall, seat=seat, error=error)


@app.route("/admin/upload", methods=["GET", "POST"])
def admin_upload():
    message = None
    error = None

    if request.method == "POST":
        # --- HANDLER 1: ROSTER (register numbers for one year) ---
        if "upload_roster" in request.form:
            file = request.files.get("roster_csv")
            year = request.form.get("year", "")
            if not file or file.filename == "":
                error = "Please choose a roster CSV file."
            else:
                try:
                    count = import_roster(db, year, parse_roster_csv(file.stream))
                    message = f"Uploaded {count} register numbers successfully."
                except SeatingError as e:
                    error = str(e)
                except (UnicodeDecodeError, PyMongoError) as e:
                    logger.error("Roster upload failed: %s", e)
                    error = f"Error: {e}"

        # --- HANDLER 2: HALL PLAN (hall, department, students_count) ---
        elif "upload_hall_plan" in request.form:
            file = request.files.get("hall_plan_file")
            if not file or file.filename == "":
                error = "Please choose a hall plan file."
            else:
                try:
                    halls = save_hall_plan(db, parse_hall_plan(file.stream, file.filename, app.config["MAX_STUDENTS_COUNT"]))
                    message = f"Uploaded hall plan for {halls} halls successfully."
                except SeatingError as e:
                    error = str(e)
                except (UnicodeDecodeError, ValueError, PyMongoError) as e:
                    logger.error("Hall plan upload failed: %s", e)
                    error = f"Error: {e}"

    return render_template("admin_upload.html", message=message, error=error, years=YEARS)


@app.route("/admin/allocate", methods=["GET", "POST"])
def admin_allocate():
    if request.method == "GET":
        return render_template("admin_allocate.html", years=YEARS, plan=None)

    year = request.form.get("year", "")
    from_date = request.form.get("from_date", "")
    to_date = request.form.get("to_date", "")
    try:
        plan = run_allocation(db, year, app.config)
        seated = save_assignments(db, plan)
    except SeatingError as e:
        return render_template("admin_allocate.html", years=YEARS, plan=None, error=str(e))
    except PyMongoError as e:
        logger.error("Allocation failed: %s", e)
        return render_template("admin_allocate.html", years=YEARS, plan=None, error=f"Error: {e}")

    last_generated = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return render_template(
        "admin_allocate.html",
        years=YEARS,
        plan=plan,
        seated=seated,
        year=year,
        from_date=from_date,
        to_date=to_date,
        last_generated=last_generated,
    )


@app.route("/admin/download-seating-pdf")
def download_seating_pdf():
    year = request.args.get("year", "")
    try:
        plan = run_allocation(db, year, app.config)
    except SeatingError as e:
        return render_template("admin_allocate.html", years=YEARS, plan=None, error=str(e)), 400
    except PyMongoError as e:
        logger.error("PDF generation failed: %s", e)
        return render_template("admin_allocate.html", years=YEARS, plan=None, error=f"Error: {e}"), 503

    pdf_buffer = generate_seating_pdf(
        plan,
        from_date=request.args.get("from") or None,
        to_date=request.args.get("to") or None,
    )
    return send_file(
        pdf_buffer,
        mimetype="application/pdf",
        as_attachment=True,
        download_name="hall_seating_arrangement.pdf",
    )


@app.route("/admin/hall-qr/<hall>")
def hall_qr(hall):
    lookup_url = url_for("qr_seat", hall=hall, _external=True)
    return render_template("hall_qr.html", hall=hall, lookup_url=lookup_url, qr_svg=make_hall_qr_svg(lookup_url))


@app.route("/admin/hall-qr")
def hall_qr_index():
    try:
        halls = list(load_hall_plan(db).keys())
    except PyMongoError as e:
        logger.error("Could not load halls: %s", e)
        halls = []
    return render_template("hall_qr_index.html", halls=halls)


if __name__ == '__main__':
    app.run(debug=True)
