from kaleereads import create_app, db
from kaleereads.models import User, Author, Book, AccessLink

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Author": Author,
        "Book": Book,
        "AccessLink": AccessLink,
    }


if __name__ == '__main__':
    app.run(debug=True)
