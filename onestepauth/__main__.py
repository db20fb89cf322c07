from .app import OneStepAuthApplication


def main():
	app = OneStepAuthApplication()
	app.run()


if __name__ == "__main__":
	main()
